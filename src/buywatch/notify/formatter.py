"""Telegram Markdown rendering for buy alerts and holder reports."""

from decimal import Decimal

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from buywatch.domain.models import PurchaseEvent, Tier
from buywatch.notify.tiers import tier_for


def fmt(value: Decimal, decimals: int = 2) -> str:
    return f"{value:,.{decimals}f}"


def short_addr(address: str) -> str:
    if len(address) <= 13:
        return address
    return f"{address[:6]}...{address[-4:]}"


class MessageFormatter:
    def __init__(
        self,
        token_symbol: str,
        quote_symbol: str,
        explorer_url: str,
        chart_url: str = "",
        buy_url: str = "",
    ) -> None:
        self.token_symbol = token_symbol
        self.quote_symbol = quote_symbol
        self.explorer_url = explorer_url.rstrip("/")
        self.chart_url = chart_url
        self.buy_url = buy_url

    def buy_caption(self, purchase: PurchaseEvent, total_supply: Decimal) -> tuple[str, Tier]:
        tier = tier_for(purchase.usd_amount)
        mcap = purchase.price * total_supply
        buyer = purchase.buyer
        caption = (
            f"{tier.emoji} *New {tier.label} Buy!*\n\n"
            f"👤 [{short_addr(buyer)}]({self.explorer_url}/address/{buyer})\n"
            f"💵 *${fmt(purchase.usd_amount)}* {self.quote_symbol}\n"
            f"💰 *{fmt(purchase.token_amount, 6)}* {self.token_symbol}\n"
            f"🏷️ *Price:* ${fmt(purchase.price, 6)}\n"
            f"🏷️ *Mcap:* ${fmt(mcap, 0)}\n\n"
            f"🔗 [View on Explorer]({self.explorer_url}/tx/{purchase.tx_hash})"
        )
        return caption, tier

    def keyboard(self) -> InlineKeyboardMarkup | None:
        buttons = []
        if self.chart_url:
            buttons.append(InlineKeyboardButton("📈 Chart", url=self.chart_url))
        if self.buy_url:
            buttons.append(InlineKeyboardButton("💵 Buy", url=self.buy_url))
        if not buttons:
            return None
        return InlineKeyboardMarkup([buttons])

    def holders_report(self, holders: int) -> str:
        return f"📊 *Current {self.token_symbol} Holders:* {holders}"
