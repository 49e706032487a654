"""
CryptoPulse — Integration Tests for Telegram delivery
"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from telegram.error import NetworkError

from cryptopulse.data.models import TelegramConfig
from cryptopulse.telegram.notifier import TEST_MESSAGE, TelegramNotifier
from cryptopulse.tests.factories import make_item

CONFIG = TelegramConfig(enabled=True, bot_token="123:abc", chat_id="-1001")


def _bot() -> MagicMock:
    bot = MagicMock()
    bot.initialize = AsyncMock()
    bot.shutdown = AsyncMock()
    bot.send_message = AsyncMock()
    return bot


class TestTelegramNotifier:
    @pytest.mark.asyncio
    async def test_notify_sends_markdown_without_preview(self):
        bot = _bot()
        notifier = TelegramNotifier()
        with patch("cryptopulse.telegram.notifier.Bot", return_value=bot) as bot_cls:
            await notifier.notify(CONFIG, make_item(1, url="https://x.example"))

        bot_cls.assert_called_once()
        assert bot_cls.call_args.kwargs["token"] == "123:abc"
        kwargs = bot.send_message.await_args.kwargs
        assert kwargs["chat_id"] == "-1001"
        assert kwargs["parse_mode"] == "Markdown"
        assert kwargs["link_preview_options"].is_disabled is True
        assert "Headline 1" in kwargs["text"]
        assert notifier.stats["messages_sent"] == 1

    @pytest.mark.asyncio
    async def test_notify_swallows_errors(self):
        bot = _bot()
        bot.send_message.side_effect = NetworkError("timed out")
        notifier = TelegramNotifier()
        with patch("cryptopulse.telegram.notifier.Bot", return_value=bot):
            await notifier.notify(CONFIG, make_item(1))
        assert notifier.stats["messages_failed"] == 1
        assert notifier.stats["messages_sent"] == 0

    @pytest.mark.asyncio
    async def test_bot_reused_per_token(self):
        bot = _bot()
        notifier = TelegramNotifier()
        with patch("cryptopulse.telegram.notifier.Bot", return_value=bot) as bot_cls:
            await notifier.notify(CONFIG, make_item(1))
            await notifier.notify(CONFIG, make_item(2))
        assert bot_cls.call_count == 1
        bot.initialize.assert_awaited_once()
        await notifier.shutdown()
        bot.shutdown.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connection_test(self):
        bot = _bot()
        notifier = TelegramNotifier()
        with patch("cryptopulse.telegram.notifier.Bot", return_value=bot):
            assert await notifier.test_connection(CONFIG) is True
        assert bot.send_message.await_args.kwargs["text"] == TEST_MESSAGE

    @pytest.mark.asyncio
    async def test_connection_test_failure(self):
        bot = _bot()
        bot.initialize.side_effect = NetworkError("invalid token")
        notifier = TelegramNotifier()
        with patch("cryptopulse.telegram.notifier.Bot", return_value=bot):
            assert await notifier.test_connection(CONFIG) is False

    @pytest.mark.asyncio
    async def test_connection_test_requires_target(self):
        notifier = TelegramNotifier()
        with patch("cryptopulse.telegram.notifier.Bot") as bot_cls:
            assert await notifier.test_connection(TelegramConfig(bot_token="t")) is False
        bot_cls.assert_not_called()
