"""EVM JSON-RPC client for the handful of read calls the monitors need."""

import logging
from typing import Any

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from buywatch.exceptions import ExternalServiceError
from buywatch.infra.blockchain.abi import encode_address, function_selector, word_to_address
from buywatch.infra.http.rate_limited_client import RateLimitedClient

logger = logging.getLogger(__name__)

BALANCE_OF = function_selector("balanceOf(address)")
TOTAL_SUPPLY = function_selector("totalSupply()")
TOKEN0 = function_selector("token0()")
TOKEN1 = function_selector("token1()")

EMPTY_CODE = {"", "0x", "0x0"}


def _hex_to_int(value: str | int | None) -> int:
    if value is None:
        return 0
    if isinstance(value, int):
        return value
    if value in ("0x", ""):
        return 0
    return int(value, 16)


class EVMRPCClient:
    """Read-only JSON-RPC client. Every call is bounded by the HTTP client's timeout."""

    def __init__(self, rpc_url: str, http_client: RateLimitedClient) -> None:
        self._rpc_url = rpc_url
        self._http = http_client

    @retry(
        retry=retry_if_exception_type(ExternalServiceError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        reraise=True,
    )
    async def _call(self, method: str, params: list) -> Any:
        """Execute a JSON-RPC call and return the result field."""
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": method,
            "params": params,
        }
        resp = await self._http.post(self._rpc_url, json=payload)
        try:
            data = resp.json()
        except ValueError as e:
            raise ExternalServiceError(f"RPC {method}: non-JSON response") from e

        if "error" in data:
            error = data["error"]
            msg = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            raise ExternalServiceError(f"RPC error ({method}): {msg}")

        return data.get("result")

    async def get_block_number(self) -> int:
        return _hex_to_int(await self._call("eth_blockNumber", []))

    async def get_logs(
        self,
        address: str | list[str],
        topics: list[str | None],
        from_block: int,
        to_block: int,
    ) -> list[dict]:
        """eth_getLogs for an inclusive block range. Caller keeps the range within provider limits."""
        result = await self._call("eth_getLogs", [{
            "fromBlock": hex(from_block),
            "toBlock": hex(to_block),
            "address": address,
            "topics": topics,
        }])
        return result or []

    async def get_transaction(self, tx_hash: str) -> dict | None:
        return await self._call("eth_getTransactionByHash", [tx_hash])

    async def get_transaction_receipt(self, tx_hash: str) -> dict | None:
        return await self._call("eth_getTransactionReceipt", [tx_hash])

    async def get_code(self, address: str) -> str:
        result = await self._call("eth_getCode", [address, "latest"])
        return result or "0x"

    async def is_contract(self, address: str) -> bool:
        """True when the address has deployed code, False for a plain account."""
        return (await self.get_code(address)).lower() not in EMPTY_CODE

    async def eth_call(self, to: str, data: str) -> str:
        result = await self._call("eth_call", [{"to": to, "data": data}, "latest"])
        return result or "0x"

    async def balance_of(self, token: str, holder: str) -> int:
        return _hex_to_int(await self.eth_call(token, BALANCE_OF + encode_address(holder)))

    async def total_supply(self, token: str) -> int:
        return _hex_to_int(await self.eth_call(token, TOTAL_SUPPLY))

    async def staked_balance(self, contract: str, holder: str, selector: str) -> int:
        """Call a single-address view (e.g. staked(address)) that returns a uint256."""
        out = await self.eth_call(contract, selector + encode_address(holder))
        # Some staking contracts return a struct; the amount is the first word.
        return _hex_to_int("0x" + out.removeprefix("0x")[:64]) if len(out) > 2 else 0

    async def token0(self, pool: str) -> str:
        out = await self.eth_call(pool, TOKEN0)
        return word_to_address(out)

    async def token1(self, pool: str) -> str:
        out = await self.eth_call(pool, TOKEN1)
        return word_to_address(out)
