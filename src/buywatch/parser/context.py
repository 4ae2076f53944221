"""TransactionContext: the evidence set for resolving one transaction's buyer."""

import logging

from buywatch.domain.models import ChainLog, TransferLog
from buywatch.exceptions import LogDecodeError
from buywatch.parser.logs import TRANSFER_TOPIC, ZERO_ADDRESS, decode_transfer, to_chain_log

logger = logging.getLogger(__name__)


class TransactionContext:
    """Token transfers emitted by one transaction, plus its declared sender.

    Read-only once built; never persisted.
    """

    def __init__(self, tx_hash: str, sender: str, transfers: list[TransferLog]) -> None:
        self.tx_hash = tx_hash.lower()
        self.sender = sender.lower()
        self._transfers: list[TransferLog] = list(transfers)

    @classmethod
    def from_receipt(cls, receipt: dict, sender: str, token_address: str) -> "TransactionContext":
        """Keep only Transfer logs emitted by `token_address`, in receipt order.

        A log that fails to decode is skipped; its siblings are still used.
        """
        token = token_address.lower()
        tx_hash = (receipt.get("transactionHash") or "").lower()
        transfers: list[TransferLog] = []
        for raw in receipt.get("logs") or []:
            try:
                log: ChainLog = to_chain_log(raw)
                if log.address != token or not log.topics or log.topics[0] != TRANSFER_TOPIC:
                    continue
                transfers.append(decode_transfer(log))
            except LogDecodeError as e:
                logger.warning("Skipping undecodable log in tx %s: %s", tx_hash, e)
        return cls(tx_hash, sender, transfers)

    def transfers(self) -> list[TransferLog]:
        return list(self._transfers)

    def balance_deltas(self) -> dict[str, int]:
        """Net token change per address. Positive = received, negative = sent.

        Keys keep first-seen order across the log sequence (sender before
        receiver within one log), which callers use to break ties.
        """
        deltas: dict[str, int] = {}
        for t in self._transfers:
            deltas[t.from_address] = deltas.get(t.from_address, 0) - t.value
            deltas[t.to_address] = deltas.get(t.to_address, 0) + t.value
        return deltas

    def supply_change(self) -> int:
        """Tokens minted minus tokens burned (transfers from / to the zero address).

        Deltas always sum to zero across all keys; this is the part of that sum
        carried by the zero address, i.e. how far the other addresses are from
        a closed ledger.
        """
        minted = sum(t.value for t in self._transfers if t.from_address == ZERO_ADDRESS)
        burned = sum(t.value for t in self._transfers if t.to_address == ZERO_ADDRESS)
        return minted - burned
