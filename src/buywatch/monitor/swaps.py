"""SwapMonitor: one tick of the buy pipeline, from log fetch to notification."""

import logging

from buywatch.exceptions import BuyerResolutionError, ExternalServiceError, LogDecodeError
from buywatch.infra.blockchain.rpc_client import EVMRPCClient
from buywatch.monitor.cursor import BlockCursor
from buywatch.monitor.pools import PoolDiscovery, PoolRegistry
from buywatch.notify.notifier import Notifier
from buywatch.parser.buyer import BuyerResolver
from buywatch.parser.classifier import PurchaseClassifier
from buywatch.parser.logs import SWAP_TOPIC, decode_swap, to_chain_log

logger = logging.getLogger(__name__)


class SwapMonitor:
    """Owns the swap cursor. Must not run concurrently with itself (see workers.ExclusiveTask)."""

    def __init__(
        self,
        rpc: EVMRPCClient,
        registry: PoolRegistry,
        classifier: PurchaseClassifier,
        resolver: BuyerResolver,
        notifier: Notifier,
        cursor: BlockCursor,
        discovery: PoolDiscovery | None = None,
    ) -> None:
        self._rpc = rpc
        self._registry = registry
        self._classifier = classifier
        self._resolver = resolver
        self._notifier = notifier
        self._cursor = cursor
        self._discovery = discovery

    async def poll(self) -> int:
        """Scan every new block range once. Returns the number of buys announced.

        A failed range fetch propagates and leaves the cursor where it was.
        """
        head = await self._rpc.get_block_number()
        if self._discovery is not None:
            await self._discovery.scan(head)

        announced = 0
        for start, end in self._cursor.pending_ranges(head):
            if len(self._registry):
                try:
                    raw_logs = await self._rpc.get_logs(self._registry.addresses(), [SWAP_TOPIC], start, end)
                except ExternalServiceError:
                    logger.warning("Swap log fetch failed for blocks %d-%d", start, end)
                    raise
                for raw in raw_logs:
                    if await self._handle(raw):
                        announced += 1
            self._cursor.advance(end)
        return announced

    async def _handle(self, raw: dict) -> bool:
        try:
            swap = decode_swap(to_chain_log(raw))
        except LogDecodeError as e:
            logger.warning("Skipping Swap log in tx %s: %s", raw.get("transactionHash"), e)
            return False

        pool = self._registry.get(swap.pool_address)
        if pool is None:
            return False

        buy = self._classifier.classify(swap, pool)
        if buy is None:
            return False

        try:
            buyer = await self._resolver.resolve(swap)
        except (ExternalServiceError, BuyerResolutionError) as e:
            logger.warning("Could not resolve buyer for tx %s (block %d): %s", swap.tx_hash, swap.block_number, e)
            return False

        purchase = buy.with_buyer(buyer)
        await self._notifier.notify_purchase(purchase)
        return True
