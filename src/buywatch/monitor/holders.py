"""HolderCounter: heuristic distinct-holder count for the token.

Every address ever seen in a Transfer is remembered for the life of the
process; a run re-reads each one's balance (plus staked balance when a
staking contract is configured) and counts the non-zero ones. Addresses that
sold out stay in the set and simply stop counting.
"""

import asyncio
import logging

from buywatch.exceptions import ExternalServiceError, LogDecodeError
from buywatch.infra.blockchain.abi import function_selector
from buywatch.infra.blockchain.rpc_client import EVMRPCClient
from buywatch.monitor.cursor import BlockCursor
from buywatch.parser.logs import TRANSFER_TOPIC, ZERO_ADDRESS, decode_transfer, to_chain_log

logger = logging.getLogger(__name__)


class HolderCounter:
    def __init__(
        self,
        rpc: EVMRPCClient,
        token_address: str,
        cursor: BlockCursor,
        staking_address: str = "",
        staked_function: str = "",
        check_delay: float = 0.1,
    ) -> None:
        self._rpc = rpc
        self._token = token_address.lower()
        self._cursor = cursor
        self._staking = staking_address.lower()
        self._staked_selector = function_selector(staked_function) if staked_function else ""
        self._check_delay = check_delay
        self.known: set[str] = set()

    async def update_known(self) -> int:
        """Scan new Transfer logs into the known-address set. Returns the set size."""
        head = await self._rpc.get_block_number()
        try:
            for start, end in self._cursor.pending_ranges(head):
                raw_logs = await self._rpc.get_logs(self._token, [TRANSFER_TOPIC], start, end)
                for raw in raw_logs:
                    try:
                        transfer = decode_transfer(to_chain_log(raw))
                    except LogDecodeError as e:
                        logger.warning("Skipping Transfer log in blocks %d-%d: %s", start, end, e)
                        continue
                    self.known.add(transfer.from_address)
                    self.known.add(transfer.to_address)
                self._cursor.advance(end)
        finally:
            self.known.discard(ZERO_ADDRESS)
        return len(self.known)

    async def _holds(self, address: str) -> bool:
        if self._staking and self._staked_selector:
            balance, staked = await asyncio.gather(
                self._rpc.balance_of(self._token, address),
                self._rpc.staked_balance(self._staking, address, self._staked_selector),
            )
            return balance > 0 or staked > 0
        return await self._rpc.balance_of(self._token, address) > 0

    async def count(self) -> int:
        holders = 0
        for address in sorted(self.known):
            try:
                if await self._holds(address):
                    holders += 1
            except ExternalServiceError as e:
                logger.warning("Balance lookup failed for %s, not counted: %s", address, e)
            if self._check_delay:
                await asyncio.sleep(self._check_delay)
        return holders

    async def run(self) -> int:
        await self.update_known()
        holders = await self.count()
        logger.info("Holder count: %d of %d known addresses", holders, len(self.known))
        return holders
