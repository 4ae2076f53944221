"""Pool registry and factory-driven pool discovery."""

import logging

from buywatch.domain.models import Pool, PoolCreatedLog
from buywatch.exceptions import ConfigurationError, LogDecodeError
from buywatch.infra.blockchain.rpc_client import EVMRPCClient
from buywatch.monitor.cursor import BlockCursor
from buywatch.parser.logs import POOL_CREATED_TOPIC, decode_pool_created, to_chain_log

logger = logging.getLogger(__name__)


class PoolRegistry:
    """Pools trading the token of interest against the quote token, keyed by address."""

    def __init__(self, token_address: str, quote_address: str) -> None:
        self._token = token_address.lower()
        self._quote = quote_address.lower()
        self._pools: dict[str, Pool] = {}

    def __len__(self) -> int:
        return len(self._pools)

    def __contains__(self, address: str) -> bool:
        return address.lower() in self._pools

    def get(self, address: str) -> Pool | None:
        return self._pools.get(address.lower())

    def addresses(self) -> list[str]:
        return list(self._pools)

    def _pair(self, token0: str, token1: str) -> bool | None:
        """True/False = token is token0/token1 of a token/quote pair; None = other pair."""
        pair = (token0.lower(), token1.lower())
        if pair == (self._token, self._quote):
            return True
        if pair == (self._quote, self._token):
            return False
        return None

    async def add_configured(self, rpc: EVMRPCClient, address: str) -> Pool:
        """Register a pool from settings, reading its token order from chain."""
        token0 = await rpc.token0(address)
        token1 = await rpc.token1(address)
        orientation = self._pair(token0, token1)
        if orientation is None:
            raise ConfigurationError(
                f"Pool {address} trades {token0}/{token1}, not {self._token} against {self._quote}"
            )
        pool = Pool(address=address.lower(), token_is_token0=orientation)
        self._pools[pool.address] = pool
        logger.info("Watching pool %s (token is token%d)", pool.address, 0 if orientation else 1)
        return pool

    def add_created(self, event: PoolCreatedLog) -> Pool | None:
        """Register a pool from a PoolCreated event if it pairs token and quote."""
        if event.pool_address in self._pools:
            return None
        orientation = self._pair(event.token0, event.token1)
        if orientation is None:
            if self._token in (event.token0, event.token1):
                logger.info("Ignoring pool %s: quote asset is not %s", event.pool_address, self._quote)
            return None
        pool = Pool(address=event.pool_address, token_is_token0=orientation)
        self._pools[pool.address] = pool
        logger.info("Discovered pool %s (fee %d)", pool.address, event.fee)
        return pool


class PoolDiscovery:
    """Scans the factory's PoolCreated logs and grows the registry."""

    def __init__(self, rpc: EVMRPCClient, registry: PoolRegistry, factory_address: str, cursor: BlockCursor) -> None:
        self._rpc = rpc
        self._registry = registry
        self._factory = factory_address.lower()
        self._cursor = cursor

    async def scan(self, head: int) -> list[Pool]:
        added: list[Pool] = []
        for start, end in self._cursor.pending_ranges(head):
            raw_logs = await self._rpc.get_logs(self._factory, [POOL_CREATED_TOPIC], start, end)
            for raw in raw_logs:
                try:
                    event = decode_pool_created(to_chain_log(raw))
                except LogDecodeError as e:
                    logger.warning("Skipping PoolCreated log in blocks %d-%d: %s", start, end, e)
                    continue
                pool = self._registry.add_created(event)
                if pool is not None:
                    added.append(pool)
            self._cursor.advance(end)
        return added
