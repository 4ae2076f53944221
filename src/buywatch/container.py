from decimal import Decimal

from dependency_injector import containers, providers
from telegram.ext import Application, ApplicationBuilder

from buywatch.config import Settings
from buywatch.infra.blockchain.rpc_client import EVMRPCClient
from buywatch.infra.http.rate_limited_client import RateLimitedClient
from buywatch.infra.telegram.channel import TelegramChannel
from buywatch.monitor.cursor import BlockCursor
from buywatch.monitor.holders import HolderCounter
from buywatch.monitor.pools import PoolDiscovery, PoolRegistry
from buywatch.monitor.swaps import SwapMonitor
from buywatch.notify.formatter import MessageFormatter
from buywatch.notify.notifier import Notifier
from buywatch.parser.buyer import BuyerResolver
from buywatch.parser.classifier import PurchaseClassifier


def build_application(token: str) -> Application:
    return ApplicationBuilder().token(token).build()


def build_discovery(
    rpc: EVMRPCClient, registry: PoolRegistry, settings: Settings,
) -> PoolDiscovery | None:
    if not settings.factory_address:
        return None
    cursor = BlockCursor("factory", settings.start_block, settings.max_block_span)
    return PoolDiscovery(rpc, registry, settings.factory_address, cursor)


class Container(containers.DeclarativeContainer):
    settings = providers.Singleton(Settings)

    http_client = providers.Singleton(
        RateLimitedClient,
        rate_per_second=settings.provided.rpc_rate_per_second,
        timeout=settings.provided.rpc_timeout_seconds,
    )
    rpc = providers.Singleton(EVMRPCClient, rpc_url=settings.provided.rpc_url, http_client=http_client)

    application = providers.Singleton(build_application, token=settings.provided.telegram_bot_token)
    channel = providers.Singleton(TelegramChannel, bot=application.provided.bot)

    formatter = providers.Singleton(
        MessageFormatter,
        token_symbol=settings.provided.token_symbol,
        quote_symbol=settings.provided.quote_symbol,
        explorer_url=settings.provided.explorer_url,
        chart_url=settings.provided.chart_url,
        buy_url=settings.provided.buy_url,
    )
    notifier = providers.Singleton(
        Notifier,
        channel=channel,
        chat_ids=settings.provided.chat_ids,
        formatter=formatter,
        images_dir=settings.provided.images_dir,
        send_delay=settings.provided.send_delay_seconds,
        total_supply=providers.Factory(Decimal, settings.provided.fallback_total_supply),
    )

    registry = providers.Singleton(
        PoolRegistry,
        token_address=settings.provided.token_address,
        quote_address=settings.provided.quote_token_address,
    )
    discovery = providers.Singleton(build_discovery, rpc=rpc, registry=registry, settings=settings)
    classifier = providers.Singleton(
        PurchaseClassifier,
        token_decimals=settings.provided.token_decimals,
        quote_decimals=settings.provided.quote_decimals,
        min_usd=settings.provided.min_usd,
    )
    resolver = providers.Singleton(BuyerResolver, rpc=rpc, token_address=settings.provided.token_address)

    swap_cursor = providers.Singleton(
        BlockCursor,
        name="swaps",
        start_block=settings.provided.start_block,
        max_span=settings.provided.max_block_span,
    )
    swap_monitor = providers.Singleton(
        SwapMonitor,
        rpc=rpc,
        registry=registry,
        classifier=classifier,
        resolver=resolver,
        notifier=notifier,
        cursor=swap_cursor,
        discovery=discovery,
    )

    holder_cursor = providers.Singleton(
        BlockCursor,
        name="holders",
        start_block=settings.provided.holder_start_block,
        max_span=settings.provided.max_block_span,
    )
    holder_counter = providers.Singleton(
        HolderCounter,
        rpc=rpc,
        token_address=settings.provided.token_address,
        cursor=holder_cursor,
        staking_address=settings.provided.staking_contract_address,
        staked_function=settings.provided.staked_function,
        check_delay=settings.provided.holder_check_delay_seconds,
    )
