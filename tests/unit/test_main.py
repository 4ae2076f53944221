"""Startup wiring: pools from settings, total supply, fatal misconfiguration."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from dependency_injector import providers

from buywatch.config import PBTC_DEPLOY_BLOCK, Settings
from buywatch.container import Container
from buywatch.exceptions import ConfigurationError, ExternalServiceError
from buywatch.main import HOLDERS_FAILED_REPLY, build_tasks, holders_command_handler, startup
from buywatch.workers.scheduler import ExclusiveTask

TOKEN = "0x31705474c1f2de7f738e34233c49522ca1e3c53c"
QUOTE = "0xfde4c96c8593536e31f229ea8f37b2ada2699bb2"
POOL = "0xc3fd337dfc5700565a5444e3b0723920802a426d"


def _container(mock_rpc, **overrides) -> Container:
    settings = Settings(
        _env_file=None,
        telegram_bot_token="123:abc",
        telegram_chat_ids="-1001",
        rpc_url="https://mainnet.base.org",
        token_address=TOKEN,
        pool_addresses=POOL,
        factory_address="",
        **overrides,
    )
    container = Container()
    container.settings.override(providers.Object(settings))
    container.rpc.override(providers.Object(mock_rpc))
    container.channel.override(providers.Object(AsyncMock()))
    return container


class TestStartup:
    async def test_registers_pools_and_reads_supply(self, mock_rpc):
        mock_rpc.get_block_number.return_value = 100
        mock_rpc.token0.return_value = TOKEN
        mock_rpc.token1.return_value = QUOTE
        mock_rpc.total_supply.return_value = 21_000_000 * 10**18
        container = _container(mock_rpc)

        await startup(container)
        assert POOL in container.registry()
        assert container.notifier().total_supply == Decimal(21_000_000)

    async def test_supply_fallback(self, mock_rpc):
        mock_rpc.get_block_number.return_value = 100
        mock_rpc.token0.return_value = TOKEN
        mock_rpc.token1.return_value = QUOTE
        mock_rpc.total_supply.side_effect = ExternalServiceError("reverted")
        container = _container(mock_rpc)

        await startup(container)
        assert container.notifier().total_supply == Decimal(100_000_000)

    async def test_unreachable_node_is_fatal(self, mock_rpc):
        mock_rpc.get_block_number.side_effect = ExternalServiceError("connection refused")
        with pytest.raises(ExternalServiceError):
            await startup(_container(mock_rpc))

    async def test_wrong_pool_is_fatal(self, mock_rpc):
        mock_rpc.get_block_number.return_value = 100
        mock_rpc.token0.return_value = TOKEN
        mock_rpc.token1.return_value = "0x4200000000000000000000000000000000000006"
        with pytest.raises(ConfigurationError):
            await startup(_container(mock_rpc))


class TestHolderTask:
    async def test_report_goes_to_requesting_chat(self, mock_rpc):
        mock_rpc.get_block_number.return_value = 100
        mock_rpc.get_logs.return_value = []
        container = _container(mock_rpc, holder_check_delay_seconds=0, send_delay_seconds=0)
        _, holder_task = build_tasks(container)

        assert await holder_task.run(chat_ids=["42"]) is True
        channel = container.channel()
        channel.send.assert_awaited_once()
        assert channel.send.call_args.args[0] == "42"

    async def test_holder_scan_starts_after_deploy_block(self, mock_rpc):
        mock_rpc.get_block_number.return_value = PBTC_DEPLOY_BLOCK + 600
        mock_rpc.get_logs.return_value = []
        container = _container(mock_rpc)

        assert container.holder_cursor().position == PBTC_DEPLOY_BLOCK
        await container.holder_counter().update_known()
        first = mock_rpc.get_logs.call_args_list[0].args
        assert (first[2], first[3]) == (PBTC_DEPLOY_BLOCK + 1, PBTC_DEPLOY_BLOCK + 500)


class TestHoldersCommand:
    def _call(self):
        update = MagicMock()
        update.effective_chat.id = 42
        context = MagicMock()
        context.bot.send_message = AsyncMock()
        return update, context

    async def test_failed_run_replies_to_requesting_chat(self):
        task = ExclusiveTask("holder report", AsyncMock(side_effect=ExternalServiceError("node down")))
        update, context = self._call()

        await holders_command_handler(task)(update, context)
        context.bot.send_message.assert_awaited_once_with(chat_id="42", text=HOLDERS_FAILED_REPLY)

    async def test_successful_run_sends_no_extra_reply(self):
        body = AsyncMock()
        task = ExclusiveTask("holder report", body)
        update, context = self._call()

        await holders_command_handler(task)(update, context)
        body.assert_awaited_once_with(chat_ids=["42"])
        context.bot.send_message.assert_not_awaited()
