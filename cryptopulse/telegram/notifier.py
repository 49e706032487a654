"""
CryptoPulse — Telegram Notifier
Formats market items as Markdown alerts and delivers them through the
user's bot. Delivery is fire-and-forget: failures are logged, never raised.
"""
from typing import Optional, Dict, Any

from telegram import Bot, LinkPreviewOptions

from cryptopulse.config.settings import get_settings
from cryptopulse.data.models import MarketItem, TelegramConfig, TradeSignal
from cryptopulse.utils.helpers import truncate
from cryptopulse.utils.logger import get_logger

logger = get_logger("telegram_notifier")


SIGNAL_LABELS = {
    TradeSignal.BUY: "🟢 BUY",
    TradeSignal.SELL: "🔴 SELL",
    TradeSignal.NEUTRAL: "⚪ NEUTRAL",
    TradeSignal.HOLD: "🟠 HOLD",
}

TEST_MESSAGE = "🎉 CryptoPulse connected! You will receive the latest market alerts here."


class TelegramNotifier:
    """Sends market alerts and connection tests to a user-supplied chat."""

    def __init__(self):
        self.settings = get_settings().telegram
        self._bots: Dict[str, Bot] = {}
        self._message_count = 0
        self._failed_count = 0

    async def _get_bot(self, token: str) -> Bot:
        """One initialized Bot per token, created on first use."""
        bot = self._bots.get(token)
        if bot is None:
            bot = Bot(token=token, base_url=self.settings.api_base_url)
            await bot.initialize()
            self._bots[token] = bot
            logger.info("telegram_bot_initialized")
        return bot

    async def shutdown(self) -> None:
        """Shutdown every bot that was initialized."""
        for bot in self._bots.values():
            try:
                await bot.shutdown()
            except Exception as e:
                logger.warning("telegram_shutdown_error", error=str(e))
        self._bots.clear()

    def format_item_message(self, item: MarketItem) -> str:
        """Format a market item as a Markdown alert."""
        label = SIGNAL_LABELS.get(item.signal, "🔵")
        local_time = item.timestamp.astimezone().strftime("%H:%M")
        summary = truncate(item.summary, self.settings.summary_max_length)
        link_line = f"🔗 [Read more]({item.url})" if item.url else ""

        message = (
            f"*{label}* | {local_time}\n"
            f"\n"
            f"*{item.title}*\n"
            f"\n"
            f"{summary}\n"
            f"\n"
            f"🧠 *AI confidence:* {item.confidence}%\n"
            f"📊 *Source score:* {item.source_credibility}/10\n"
        )
        if link_line:
            message += f"{link_line}\n"
        return message

    async def test_connection(self, config: TelegramConfig) -> bool:
        """Send the connection-test message. True when Telegram accepted it."""
        if not config.bot_token or not config.chat_id:
            logger.warning("telegram_test_missing_target")
            return False
        try:
            bot = await self._get_bot(config.bot_token)
            await bot.send_message(
                chat_id=config.chat_id,
                text=TEST_MESSAGE,
                parse_mode="Markdown",
            )
            logger.info("telegram_test_ok")
            return True
        except Exception as e:
            logger.error("telegram_test_failed", error=str(e))
            return False

    async def notify(self, config: TelegramConfig, item: MarketItem) -> None:
        """Send one market alert. Never raises."""
        try:
            bot = await self._get_bot(config.bot_token)
            await bot.send_message(
                chat_id=config.chat_id,
                text=self.format_item_message(item),
                parse_mode="Markdown",
                link_preview_options=LinkPreviewOptions(is_disabled=True),
            )
            self._message_count += 1
            logger.info("telegram_sent", item_id=item.id, signal=item.signal.value,
                        total_sent=self._message_count)
        except Exception as e:
            self._failed_count += 1
            logger.error("telegram_send_failed", item_id=item.id, error=str(e))

    @property
    def stats(self) -> Dict[str, Any]:
        return {
            "bots": len(self._bots),
            "messages_sent": self._message_count,
            "messages_failed": self._failed_count,
        }


# Singleton
_notifier: Optional[TelegramNotifier] = None


def get_notifier() -> TelegramNotifier:
    global _notifier
    if _notifier is None:
        _notifier = TelegramNotifier()
    return _notifier
