"""Block cursor: last processed block for one polling task."""

import logging
from collections.abc import Iterator

logger = logging.getLogger(__name__)


def block_ranges(from_block: int, to_block: int, max_span: int) -> Iterator[tuple[int, int]]:
    """Split [from_block, to_block] into inclusive sub-ranges of at most `max_span` blocks."""
    span = max(1, max_span)
    start = from_block
    while start <= to_block:
        end = min(start + span - 1, to_block)
        yield start, end
        start = end + 1


class BlockCursor:
    """Process-lifetime cursor owned by a single periodic task.

    A configured start block is the last block already processed, so the
    first tick begins right after it. With none configured the first tick
    begins at the current head (history is skipped). The position only moves
    forward, and only after a sub-range has been fully handled, so a failed
    fetch is retried on the next tick.
    """

    def __init__(self, name: str, start_block: int | None = None, max_span: int = 500) -> None:
        self.name = name
        self.max_span = max_span
        self._position: int | None = start_block

    @property
    def position(self) -> int | None:
        return self._position

    def pending_ranges(self, head: int) -> list[tuple[int, int]]:
        """Sub-ranges still to scan up to `head`. Initialises the cursor on first use."""
        if self._position is None:
            self._position = head - 1
            logger.info("%s cursor starting at block %d", self.name, head)
        return list(block_ranges(self._position + 1, head, self.max_span))

    def advance(self, to_block: int) -> None:
        if self._position is not None and to_block <= self._position:
            return
        self._position = to_block
