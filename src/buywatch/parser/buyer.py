"""BuyerResolver: find the account that really ended up holding the bought tokens.

A swap's `recipient` is often a router or aggregator that forwards the tokens
on within the same transaction, and the transaction sender may be a relayer or
smart wallet. Instead of walking transfer chains, fold every token Transfer in
the transaction into net balance deltas: whoever is left with the largest
positive delta and has no deployed code is the buyer. Forwarding hops net out
to zero on their own.

Fallback when nobody qualifies (tokens parked in a contract, or no transfer
logs at all): the transaction sender if it is a plain account, else the swap
recipient if it is a plain account, else the transaction sender regardless.
That last step can name a contract as "buyer"; it is kept so downstream
formatting always has an address to show.
"""

import logging
from collections.abc import Awaitable, Callable

from buywatch.domain.models import SwapLog
from buywatch.exceptions import BuyerResolutionError, ExternalServiceError
from buywatch.infra.blockchain.abi import to_checksum
from buywatch.infra.blockchain.rpc_client import EVMRPCClient
from buywatch.parser.context import TransactionContext
from buywatch.parser.logs import ZERO_ADDRESS

logger = logging.getLogger(__name__)


class BuyerResolver:
    def __init__(self, rpc: EVMRPCClient, token_address: str) -> None:
        self._rpc = rpc
        self._token = token_address.lower()

    async def load_context(self, tx_hash: str) -> TransactionContext:
        receipt = await self._rpc.get_transaction_receipt(tx_hash)
        tx = await self._rpc.get_transaction(tx_hash)
        if receipt is None or tx is None:
            raise ExternalServiceError(f"Transaction {tx_hash} not available from node yet")
        return TransactionContext.from_receipt(receipt, tx.get("from") or "", self._token)

    async def resolve(self, swap: SwapLog) -> str:
        """Return the checksummed buyer address for a swap.

        Raises ExternalServiceError when the node cannot serve the receipt,
        transaction or code lookups, and BuyerResolutionError when neither the
        transaction nor the swap names a valid address. Callers skip the
        purchase in both cases.
        """
        context = await self.load_context(swap.tx_hash)
        buyer = await self.resolve_in_context(context, swap)
        if not buyer:
            raise BuyerResolutionError(f"Tx {swap.tx_hash} has no sender and the swap no recipient")
        try:
            return to_checksum(buyer)
        except ValueError as e:
            raise BuyerResolutionError(f"Tx {swap.tx_hash}: {buyer!r} is not an address") from e

    async def resolve_in_context(self, context: TransactionContext, swap: SwapLog) -> str:
        code_cache: dict[str, bool] = {}

        async def is_contract(address: str) -> bool:
            if address not in code_cache:
                code_cache[address] = await self._rpc.is_contract(address)
            return code_cache[address]

        if context.supply_change():
            logger.debug("Tx %s mints/burns %d units of the token", context.tx_hash, context.supply_change())

        buyer = await self._largest_plain_receiver(context, is_contract)
        if buyer is not None:
            return buyer

        logger.debug("No plain-account net receiver in tx %s, using fallback chain", context.tx_hash)
        if context.sender and not await is_contract(context.sender):
            return context.sender
        if swap.recipient and not await is_contract(swap.recipient):
            return swap.recipient
        # Known inaccuracy: may be a contract (relayer, smart wallet).
        return context.sender or swap.recipient

    @staticmethod
    async def _largest_plain_receiver(
        context: TransactionContext, is_contract: Callable[[str], Awaitable[bool]],
    ) -> str | None:
        receivers = [
            (addr, delta)
            for addr, delta in context.balance_deltas().items()
            if delta > 0 and addr != ZERO_ADDRESS
        ]
        # Stable sort keeps first-seen order among equal deltas.
        receivers.sort(key=lambda item: item[1], reverse=True)
        for addr, _delta in receivers:
            if not await is_contract(addr):
                return addr
        return None
