"""Process bootstrap: wire the container, register the /holders command and periodic jobs."""

import logging
from decimal import Decimal

from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes

from buywatch.container import Container
from buywatch.exceptions import ExternalServiceError
from buywatch.workers.scheduler import ExclusiveTask

logger = logging.getLogger("buywatch")

HOLDER_FIRST_RUN_SECONDS = 5
HOLDERS_BUSY_REPLY = "A holder count is already running, try again shortly."
HOLDERS_FAILED_REPLY = "Holder count failed, try again later."


async def startup(container: Container) -> None:
    """Fatal on misconfiguration or an unreachable node; the process should not start."""
    settings = container.settings()
    rpc = container.rpc()

    head = await rpc.get_block_number()
    logger.info("Connected to node, head block %d", head)

    registry = container.registry()
    for address in settings.pools:
        await registry.add_configured(rpc, address)

    notifier = container.notifier()
    try:
        raw = await rpc.total_supply(settings.token_address)
        notifier.total_supply = Decimal(raw) / Decimal(10) ** settings.token_decimals
        logger.info("totalSupply = %s", f"{notifier.total_supply:,.0f}")
    except ExternalServiceError:
        logger.warning("Using fallback totalSupply %s", f"{settings.fallback_total_supply:,}")


def build_tasks(container: Container) -> tuple[ExclusiveTask, ExclusiveTask]:
    swap_monitor = container.swap_monitor()
    holder_counter = container.holder_counter()
    notifier = container.notifier()

    async def holder_report(chat_ids: list[str] | None = None) -> None:
        holders = await holder_counter.run()
        await notifier.notify_holders(holders, chat_ids=chat_ids)

    return ExclusiveTask("swap poll", swap_monitor.poll), ExclusiveTask("holder report", holder_report)


def holders_command_handler(holder_task: ExclusiveTask):
    """/holders: run the report for the requesting chat only."""

    async def holders_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        chat_id = str(update.effective_chat.id)
        if holder_task.running:
            await context.bot.send_message(chat_id=chat_id, text=HOLDERS_BUSY_REPLY)
            return
        if not await holder_task.run(chat_ids=[chat_id]):
            await context.bot.send_message(chat_id=chat_id, text=HOLDERS_FAILED_REPLY)

    return holders_command


def build_app(container: Container) -> Application:
    settings = container.settings()
    app = container.application()
    swap_task, holder_task = build_tasks(container)

    async def post_init(application: Application) -> None:
        await startup(container)

    async def post_shutdown(application: Application) -> None:
        await container.http_client().close()

    app.post_init = post_init
    app.post_shutdown = post_shutdown
    app.add_handler(CommandHandler("holders", holders_command_handler(holder_task), block=False))
    app.job_queue.run_repeating(swap_task.job_callback, interval=settings.poll_interval_seconds, first=1)
    app.job_queue.run_repeating(
        holder_task.job_callback, interval=settings.holder_interval_seconds, first=HOLDER_FIRST_RUN_SECONDS,
    )
    return app


def run() -> None:
    container = Container()
    settings = container.settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)-5s %(name)s - %(message)s",
    )
    for noisy in ("httpx", "httpcore", "telegram", "apscheduler"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    app = build_app(container)
    logger.info("Polling swaps every %ss for %s", settings.poll_interval_seconds, settings.token_symbol)
    app.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    run()
