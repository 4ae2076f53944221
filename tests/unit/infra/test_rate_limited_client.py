"""Tests for the throttled node transport."""

import httpx
import pytest

from buywatch.exceptions import ExternalServiceError
from buywatch.infra.http import rate_limited_client
from buywatch.infra.http.rate_limited_client import RateLimitedClient

RPC_URL = "https://mainnet.base.org"


def _client(handler) -> RateLimitedClient:
    client = RateLimitedClient(rate_per_second=1000)
    client._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return client


class TestSlots:
    async def test_slots_are_spaced_by_interval(self, monkeypatch):
        monkeypatch.setattr(rate_limited_client.time, "monotonic", lambda: 100.0)
        client = RateLimitedClient(rate_per_second=2)

        delays = [await client._reserve_slot() for _ in range(3)]
        assert delays == [0.0, 0.5, 1.0]
        await client.close()


class TestPost:
    async def test_returns_response(self):
        client = _client(lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x10"}))

        resp = await client.post(RPC_URL, json={"method": "eth_blockNumber"})
        assert resp.json()["result"] == "0x10"
        await client.close()

    async def test_http_error_status_raises(self):
        client = _client(lambda request: httpx.Response(429))

        with pytest.raises(ExternalServiceError, match="HTTP 429"):
            await client.post(RPC_URL, json={})
        await client.close()

    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        client = _client(handler)
        with pytest.raises(ExternalServiceError):
            await client.post(RPC_URL, json={})
        await client.close()
