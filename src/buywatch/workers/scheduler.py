"""Non-overlapping periodic tasks.

Each periodic body owns mutable state (a block cursor, the known-address set)
that must only ever be touched by one invocation at a time. ExclusiveTask
skips a tick outright when the previous one is still in flight.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from telegram.ext import ContextTypes

logger = logging.getLogger(__name__)


class ExclusiveTask:
    def __init__(self, name: str, func: Callable[..., Awaitable[Any]]) -> None:
        self.name = name
        self._func = func
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    async def run(self, *args: Any, **kwargs: Any) -> bool:
        """Run once unless already running. True only when the body completed.

        Errors are logged and swallowed here so the scheduler keeps ticking;
        the next tick is the retry.
        """
        if self._lock.locked():
            logger.debug("%s still in flight, skipping this tick", self.name)
            return False
        async with self._lock:
            try:
                await self._func(*args, **kwargs)
                return True
            except Exception:
                logger.exception("%s failed, will retry on next tick", self.name)
                return False

    async def job_callback(self, context: ContextTypes.DEFAULT_TYPE) -> None:
        """JobQueue adapter."""
        await self.run()
