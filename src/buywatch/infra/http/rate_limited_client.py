"""Throttled HTTP transport for the node's JSON-RPC endpoint."""

import asyncio
import time

import httpx

from buywatch.exceptions import ExternalServiceError

JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


class RateLimitedClient:
    """POSTs JSON bodies to the node no faster than `rate_per_second`.

    Each caller reserves the next free send slot under the lock and then
    sleeps outside it, so concurrent tasks queue up in order instead of
    serialising on the sleep. Every request is bounded by `timeout`.

    Transport failures (timeouts, refused connections) and non-2xx answers are
    raised as ExternalServiceError so callers only deal with one transient type.
    """

    def __init__(self, rate_per_second: float = 10.0, timeout: float = 15.0) -> None:
        self._interval = 1.0 / rate_per_second
        self._next_slot = 0.0
        self._lock = asyncio.Lock()
        self._client = httpx.AsyncClient(timeout=httpx.Timeout(timeout), headers=JSON_HEADERS)

    async def _reserve_slot(self) -> float:
        async with self._lock:
            now = time.monotonic()
            slot = max(now, self._next_slot)
            self._next_slot = slot + self._interval
            return slot - now

    async def post(self, url: str, json: dict | list | None = None) -> httpx.Response:
        delay = await self._reserve_slot()
        if delay > 0:
            await asyncio.sleep(delay)
        try:
            resp = await self._client.post(url, json=json)
        except httpx.TransportError as e:
            raise ExternalServiceError(f"POST {url} failed: {e!r}") from e
        if resp.status_code >= 400:
            raise ExternalServiceError(f"POST {url} returned HTTP {resp.status_code}")
        return resp

    async def close(self) -> None:
        await self._client.aclose()
