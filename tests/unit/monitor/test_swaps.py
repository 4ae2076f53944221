"""SwapMonitor tick: fetch -> classify -> resolve -> notify, with cursor bookkeeping."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from buywatch.domain.models import Pool
from buywatch.exceptions import BuyerResolutionError, ExternalServiceError
from buywatch.monitor.cursor import BlockCursor
from buywatch.monitor.pools import PoolRegistry
from buywatch.monitor.swaps import SwapMonitor
from buywatch.parser.classifier import PurchaseClassifier
from buywatch.parser.logs import SWAP_TOPIC

TOKEN = "0x31705474c1f2de7f738e34233c49522ca1e3c53c"
QUOTE = "0xfde4c96c8593536e31f229ea8f37b2ada2699bb2"
POOL = "0xc3fd337dfc5700565a5444e3b0723920802a426d"
BUYER = "0x1111111111111111111111111111111111111111"


def _topic(address: str) -> str:
    return "0x" + address[2:].rjust(64, "0")


def _word(value: int) -> str:
    return format(value % 2**256, "064x")


def _swap_log(amount0: int, amount1: int, tx: str = "0x" + "aa" * 32, block: int = 101) -> dict:
    return {
        "address": POOL,
        "topics": [SWAP_TOPIC, _topic("0x" + "33" * 20), _topic(BUYER)],
        "data": "0x" + "".join(_word(v) for v in (amount0, amount1, 2**96, 10**18, 0)),
        "transactionHash": tx,
        "blockNumber": hex(block),
        "logIndex": "0x0",
    }


def _registry() -> PoolRegistry:
    registry = PoolRegistry(TOKEN, QUOTE)
    registry._pools[POOL] = Pool(address=POOL, token_is_token0=True)
    return registry


def _monitor(mock_rpc, registry=None, cursor=None, min_usd="10"):
    resolver = AsyncMock()
    resolver.resolve.return_value = "0x1111111111111111111111111111111111111111"
    notifier = AsyncMock()
    monitor = SwapMonitor(
        rpc=mock_rpc,
        registry=registry if registry is not None else _registry(),
        classifier=PurchaseClassifier(18, 6, Decimal(min_usd)),
        resolver=resolver,
        notifier=notifier,
        cursor=cursor or BlockCursor("swaps", start_block=100, max_span=40),
    )
    return monitor, resolver, notifier


class TestPoll:
    async def test_buy_above_floor_notifies_once(self, mock_rpc):
        mock_rpc.get_block_number.return_value = 110
        mock_rpc.get_logs.return_value = [_swap_log(-10**18, 10_000_000)]
        monitor, resolver, notifier = _monitor(mock_rpc)

        assert await monitor.poll() == 1
        notifier.notify_purchase.assert_awaited_once()
        purchase = notifier.notify_purchase.call_args.args[0]
        assert purchase.buyer == BUYER
        assert purchase.usd_amount == Decimal(10)

    async def test_buy_below_floor_is_silent(self, mock_rpc):
        mock_rpc.get_block_number.return_value = 110
        mock_rpc.get_logs.return_value = [_swap_log(-10**18, 9_990_000)]
        monitor, resolver, notifier = _monitor(mock_rpc)

        assert await monitor.poll() == 0
        notifier.notify_purchase.assert_not_awaited()
        resolver.resolve.assert_not_awaited()

    async def test_sell_is_silent(self, mock_rpc):
        mock_rpc.get_block_number.return_value = 110
        mock_rpc.get_logs.return_value = [_swap_log(10**18, -50_000_000)]
        monitor, _, notifier = _monitor(mock_rpc)

        assert await monitor.poll() == 0
        notifier.notify_purchase.assert_not_awaited()

    async def test_queries_bounded_ranges_and_advances(self, mock_rpc):
        mock_rpc.get_block_number.return_value = 150
        mock_rpc.get_logs.return_value = []
        cursor = BlockCursor("swaps", start_block=100, max_span=40)
        monitor, _, _ = _monitor(mock_rpc, cursor=cursor)

        await monitor.poll()
        ranges = [(c.args[2], c.args[3]) for c in mock_rpc.get_logs.call_args_list]
        assert ranges == [(101, 140), (141, 150)]
        assert mock_rpc.get_logs.call_args_list[0].args[0] == [POOL]
        assert cursor.position == 150

    async def test_fetch_failure_keeps_cursor(self, mock_rpc):
        mock_rpc.get_block_number.return_value = 150
        mock_rpc.get_logs.side_effect = ExternalServiceError("rate limited")
        cursor = BlockCursor("swaps", start_block=100, max_span=40)
        monitor, _, _ = _monitor(mock_rpc, cursor=cursor)

        with pytest.raises(ExternalServiceError):
            await monitor.poll()
        assert cursor.position == 100

    async def test_resolution_failure_skips_purchase_only(self, mock_rpc):
        mock_rpc.get_block_number.return_value = 110
        mock_rpc.get_logs.return_value = [
            _swap_log(-10**18, 20_000_000, tx="0x" + "01" * 32),
            _swap_log(-10**18, 30_000_000, tx="0x" + "02" * 32),
        ]
        monitor, resolver, notifier = _monitor(mock_rpc)
        resolver.resolve.side_effect = [ExternalServiceError("timeout"), BUYER]

        assert await monitor.poll() == 1
        purchase = notifier.notify_purchase.call_args.args[0]
        assert purchase.tx_hash == "0x" + "02" * 32

    async def test_malformed_swap_skipped(self, mock_rpc):
        bad = _swap_log(-10**18, 20_000_000)
        bad["data"] = "0x00"
        mock_rpc.get_block_number.return_value = 110
        mock_rpc.get_logs.return_value = [bad, _swap_log(-10**18, 20_000_000)]
        monitor, _, notifier = _monitor(mock_rpc)

        assert await monitor.poll() == 1

    async def test_non_hex_swap_does_not_block_the_range(self, mock_rpc):
        bad = _swap_log(-10**18, 20_000_000, tx="0x" + "02" * 32)
        bad["data"] = "0x" + "zz" * 160
        mock_rpc.get_block_number.return_value = 110
        mock_rpc.get_logs.return_value = [_swap_log(-10**18, 20_000_000, tx="0x" + "01" * 32), bad]
        cursor = BlockCursor("swaps", start_block=100, max_span=40)
        monitor, _, notifier = _monitor(mock_rpc, cursor=cursor)

        for _ in range(3):
            await monitor.poll()
        notifier.notify_purchase.assert_awaited_once()
        mock_rpc.get_logs.assert_awaited_once()
        assert cursor.position == 110

    async def test_unnamed_buyer_skips_purchase_only(self, mock_rpc):
        mock_rpc.get_block_number.return_value = 110
        mock_rpc.get_logs.return_value = [
            _swap_log(-10**18, 20_000_000, tx="0x" + "01" * 32),
            _swap_log(-10**18, 30_000_000, tx="0x" + "02" * 32),
        ]
        cursor = BlockCursor("swaps", start_block=100, max_span=40)
        monitor, resolver, notifier = _monitor(mock_rpc, cursor=cursor)
        resolver.resolve.side_effect = [BuyerResolutionError("no sender, no recipient"), BUYER]

        assert await monitor.poll() == 1
        assert notifier.notify_purchase.call_args.args[0].tx_hash == "0x" + "02" * 32
        assert cursor.position == 110

        assert await monitor.poll() == 1

    async def test_no_pools_advances_without_query(self, mock_rpc):
        mock_rpc.get_block_number.return_value = 110
        cursor = BlockCursor("swaps", start_block=100, max_span=40)
        monitor, _, _ = _monitor(mock_rpc, registry=PoolRegistry(TOKEN, QUOTE), cursor=cursor)

        assert await monitor.poll() == 0
        mock_rpc.get_logs.assert_not_awaited()
        assert cursor.position == 110

    async def test_discovery_runs_before_swaps(self, mock_rpc):
        mock_rpc.get_block_number.return_value = 110
        mock_rpc.get_logs.return_value = []
        monitor, _, _ = _monitor(mock_rpc)
        discovery = AsyncMock()
        monitor._discovery = discovery

        await monitor.poll()
        discovery.scan.assert_awaited_once_with(110)
