"""Decode raw RPC log dicts into typed events."""

from buywatch.domain.models import ChainLog, PoolCreatedLog, SwapLog, TransferLog
from buywatch.exceptions import LogDecodeError
from buywatch.infra.blockchain.abi import event_topic, split_words, word_to_address, word_to_int

TRANSFER_TOPIC = event_topic("Transfer(address,address,uint256)")
SWAP_TOPIC = event_topic("Swap(address,address,int256,int256,uint160,uint128,int24)")
POOL_CREATED_TOPIC = event_topic("PoolCreated(address,address,uint24,int24,address)")

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def _as_int(value) -> int:
    if isinstance(value, int):
        return value
    return int(value, 16)


def to_chain_log(raw: dict) -> ChainLog:
    """Normalise an RPC log object (hex quantities, mixed-case addresses)."""
    try:
        return ChainLog(
            address=raw["address"].lower(),
            topics=tuple(t.lower() for t in raw.get("topics") or ()),
            data=raw.get("data") or "0x",
            tx_hash=raw["transactionHash"].lower(),
            block_number=_as_int(raw["blockNumber"]),
            log_index=_as_int(raw.get("logIndex") or 0),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise LogDecodeError(f"Malformed log object: {e!r}") from e


def _expect(log: ChainLog, topic: str, n_topics: int, n_words: int, name: str) -> list[str]:
    """Check the log shape and return its data words. Topics and words must be hex."""
    if len(log.topics) != n_topics or log.topics[0] != topic:
        raise LogDecodeError(f"{name}: unexpected topics in tx {log.tx_hash} log {log.log_index}")
    try:
        words = split_words(log.data)
        for value in (*log.topics, *words):
            bytes.fromhex(value.removeprefix("0x"))
    except ValueError as e:
        raise LogDecodeError(f"{name}: {e} in tx {log.tx_hash} log {log.log_index}") from e
    if len(words) < n_words:
        raise LogDecodeError(f"{name}: expected {n_words} data words, got {len(words)} in tx {log.tx_hash}")
    return words


def decode_transfer(log: ChainLog) -> TransferLog:
    words = _expect(log, TRANSFER_TOPIC, 3, 1, "Transfer")
    return TransferLog(
        token_address=log.address,
        from_address=word_to_address(log.topics[1]),
        to_address=word_to_address(log.topics[2]),
        value=word_to_int(words[0]),
        tx_hash=log.tx_hash,
        block_number=log.block_number,
        log_index=log.log_index,
    )


def decode_swap(log: ChainLog) -> SwapLog:
    words = _expect(log, SWAP_TOPIC, 3, 5, "Swap")
    return SwapLog(
        pool_address=log.address,
        sender=word_to_address(log.topics[1]),
        recipient=word_to_address(log.topics[2]),
        amount0=word_to_int(words[0], signed=True),
        amount1=word_to_int(words[1], signed=True),
        tx_hash=log.tx_hash,
        block_number=log.block_number,
        log_index=log.log_index,
    )


def decode_pool_created(log: ChainLog) -> PoolCreatedLog:
    # token0, token1, fee are indexed; data = tickSpacing, pool
    words = _expect(log, POOL_CREATED_TOPIC, 4, 2, "PoolCreated")
    return PoolCreatedLog(
        token0=word_to_address(log.topics[1]),
        token1=word_to_address(log.topics[2]),
        fee=word_to_int(log.topics[3]),
        pool_address=word_to_address(words[1]),
        block_number=log.block_number,
    )
