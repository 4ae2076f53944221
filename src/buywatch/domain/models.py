"""Core data types shared by the parser, monitors and notifier."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class ChainLog(BaseModel):
    """One raw event log as returned by eth_getLogs / a transaction receipt."""

    model_config = ConfigDict(frozen=True)

    address: str  # emitting contract, lowercase
    topics: tuple[str, ...]
    data: str = "0x"
    tx_hash: str
    block_number: int
    log_index: int = 0


class TransferLog(BaseModel):
    """A decoded ERC20 Transfer(from, to, value)."""

    model_config = ConfigDict(frozen=True)

    token_address: str
    from_address: str
    to_address: str
    value: int  # smallest unit
    tx_hash: str
    block_number: int
    log_index: int = 0


class SwapLog(BaseModel):
    """A decoded Uniswap V3 Swap. Amounts are signed from the pool's point of view."""

    model_config = ConfigDict(frozen=True)

    pool_address: str
    sender: str
    recipient: str
    amount0: int  # > 0 = into the pool, < 0 = out of the pool
    amount1: int
    tx_hash: str
    block_number: int
    log_index: int = 0


class PoolCreatedLog(BaseModel):
    """A decoded Uniswap V3 factory PoolCreated."""

    model_config = ConfigDict(frozen=True)

    token0: str
    token1: str
    fee: int
    pool_address: str
    block_number: int


class Pool(BaseModel):
    """A watched pool and which side of it the token of interest sits on."""

    model_config = ConfigDict(frozen=True)

    address: str
    token_is_token0: bool

    def legs(self, swap: SwapLog) -> tuple[int, int]:
        """Return (token_leg, quote_leg) of a swap in this pool."""
        if self.token_is_token0:
            return swap.amount0, swap.amount1
        return swap.amount1, swap.amount0


class PurchaseEvent(BaseModel):
    """A classified, resolved buy. Built once per swap and handed straight to the notifier."""

    model_config = ConfigDict(frozen=True)

    buyer: str  # checksummed
    token_amount: Decimal
    usd_amount: Decimal
    price: Decimal  # USD per token
    tx_hash: str
    pool_address: str
    block_number: int = 0


class Tier(BaseModel):
    """Display bucket for a USD notional. `min_usd` is inclusive."""

    model_config = ConfigDict(frozen=True)

    label: str
    emoji: str
    image: str
    min_usd: Decimal
