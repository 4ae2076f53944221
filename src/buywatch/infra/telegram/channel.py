"""Thin async wrapper over telegram.Bot used as the outbound messaging channel."""

from pathlib import Path

from telegram import Bot, InlineKeyboardMarkup
from telegram.constants import ParseMode


class TelegramChannel:
    def __init__(self, bot: Bot) -> None:
        self._bot = bot

    async def send(
        self,
        chat_id: str | int,
        text: str,
        photo: Path | None = None,
        keyboard: InlineKeyboardMarkup | None = None,
    ) -> None:
        """Send a Markdown message, as a photo caption when `photo` is given.

        Raises telegram.error.TelegramError on rejection.
        """
        if photo is not None:
            with photo.open("rb") as fh:
                await self._bot.send_photo(
                    chat_id=chat_id,
                    photo=fh,
                    caption=text,
                    parse_mode=ParseMode.MARKDOWN,
                    reply_markup=keyboard,
                )
            return
        await self._bot.send_message(
            chat_id=chat_id,
            text=text,
            parse_mode=ParseMode.MARKDOWN,
            reply_markup=keyboard,
            disable_web_page_preview=True,
        )
