"""Notifier: fan a message out to every configured chat, one at a time."""

import asyncio
import logging
from decimal import Decimal
from pathlib import Path

from telegram import InlineKeyboardMarkup
from telegram.error import TelegramError

from buywatch.domain.models import PurchaseEvent
from buywatch.infra.telegram.channel import TelegramChannel
from buywatch.notify.formatter import MessageFormatter, short_addr

logger = logging.getLogger(__name__)


class Notifier:
    """Delivers to each chat in order with a fixed pause after every send.

    A rejected send is logged and the remaining chats still get the message.
    """

    def __init__(
        self,
        channel: TelegramChannel,
        chat_ids: list[str],
        formatter: MessageFormatter,
        images_dir: str | Path = "images",
        send_delay: float = 0.3,
        total_supply: Decimal = Decimal(0),
    ) -> None:
        self._channel = channel
        self._chat_ids = list(chat_ids)
        self.formatter = formatter
        self._images_dir = Path(images_dir)
        self._send_delay = send_delay
        self.total_supply = total_supply

    async def broadcast(
        self,
        text: str,
        photo: Path | None = None,
        keyboard: InlineKeyboardMarkup | None = None,
        chat_ids: list[str] | None = None,
    ) -> dict[str, bool]:
        results: dict[str, bool] = {}
        for chat_id in chat_ids if chat_ids is not None else self._chat_ids:
            try:
                await self._channel.send(chat_id, text, photo=photo, keyboard=keyboard)
                results[str(chat_id)] = True
            except (TelegramError, OSError) as e:
                logger.warning("Delivery to chat %s failed: %s", chat_id, e)
                results[str(chat_id)] = False
            await asyncio.sleep(self._send_delay)
        return results

    async def notify_purchase(self, purchase: PurchaseEvent) -> dict[str, bool]:
        caption, tier = self.formatter.buy_caption(purchase, self.total_supply)
        image = self._images_dir / tier.image
        results = await self.broadcast(
            caption,
            photo=image if image.is_file() else None,
            keyboard=self.formatter.keyboard(),
        )
        logger.info(
            "%s | $%s | %s | tx %s | pool %s",
            tier.label, f"{purchase.usd_amount:,.2f}", short_addr(purchase.buyer),
            purchase.tx_hash, purchase.pool_address,
        )
        return results

    async def notify_holders(self, holders: int, chat_ids: list[str] | None = None) -> dict[str, bool]:
        return await self.broadcast(self.formatter.holders_report(holders), chat_ids=chat_ids)
