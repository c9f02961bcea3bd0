"""Tests for the Telegram reminder notifier."""

import asyncio
import threading
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from fitcal.adapters.telegram_notifier import TelegramNotifier
from fitcal.core.errors import DeliveryError


@pytest.fixture
def loop():
    """An event loop running in a background thread, like the bot's."""
    loop = asyncio.new_event_loop()
    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()
    yield loop
    loop.call_soon_threadsafe(loop.stop)
    thread.join(timeout=5)
    loop.close()


@pytest.fixture
def bot():
    bot = MagicMock()
    bot.send_message = AsyncMock()
    return bot


class TestTelegramNotifier:
    def test_sends_to_every_chat(self, bot, loop):
        notifier = TelegramNotifier(bot, [111, 222], loop)

        notifier.deliver("Training reminder", "Training with Anna in 60 minutes (14:00)", "s1", "icon.png")

        assert bot.send_message.await_count == 2
        chats = [c.kwargs["chat_id"] for c in bot.send_message.await_args_list]
        assert chats == [111, 222]
        first = bot.send_message.await_args_list[0].kwargs
        assert first["parse_mode"] == "MarkdownV2"
        assert "Anna" in first["text"]

    def test_partial_failure_still_delivered(self, bot, loop, caplog):
        bot.send_message.side_effect = [RuntimeError("chat not found"), None]
        notifier = TelegramNotifier(bot, [111, 222], loop)

        notifier.deliver("Training reminder", "body", "s1", "icon.png")

        assert "chat 111" in caplog.text

    def test_total_failure_raises(self, bot, loop):
        bot.send_message.side_effect = RuntimeError("network down")
        notifier = TelegramNotifier(bot, [111], loop)

        with pytest.raises(DeliveryError):
            notifier.deliver("Training reminder", "body", "s1", "icon.png")

    def test_no_chats_raises(self, bot, loop):
        with pytest.raises(DeliveryError):
            TelegramNotifier(bot, [], loop).deliver("Training reminder", "body", "s1", "icon.png")
        bot.send_message.assert_not_awaited()

    def test_timeout(self, bot, loop, caplog):
        async def slow(**kwargs):
            await asyncio.sleep(5)

        bot.send_message.side_effect = slow
        notifier = TelegramNotifier(bot, [111], loop, timeout=0.05)

        with pytest.raises(DeliveryError):
            notifier.deliver("Training reminder", "body", "s1", "icon.png")
        assert "Timed out" in caplog.text

    def test_uses_markdown_conversion(self, bot, loop):
        with patch("fitcal.telegram_format.telegramify_markdown.markdownify", return_value="converted") as md:
            TelegramNotifier(bot, [111], loop).deliver("Training reminder", "body", "s1", "icon.png")

        md.assert_called_once_with("**Training reminder**\n\nbody")
        assert bot.send_message.await_args.kwargs["text"] == "converted"
