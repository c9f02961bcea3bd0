"""Telegram notifier adapter - sends reminders through the bot."""

import asyncio
import logging

from telegram import Bot

from fitcal.core.errors import DeliveryError
from fitcal.telegram_format import send_markdown

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """
    Telegram reminder delivery.

    Implements Notifier protocol. deliver() is called from a worker thread;
    messages are sent on the bot's event loop and awaited for up to
    `timeout` seconds per chat.
    """

    def __init__(
        self,
        bot: Bot,
        chat_ids: list[int],
        loop: asyncio.AbstractEventLoop,
        timeout: float = 10,
    ):
        self.bot = bot
        self.chat_ids = chat_ids
        self.loop = loop
        self.timeout = timeout

    def deliver(self, title: str, body: str, source_id: str, icon_ref: str) -> None:
        """Send a reminder to every chat. Raises DeliveryError if none got it."""
        if not self.chat_ids:
            raise DeliveryError("No Telegram chats configured for reminders")

        text = f"**{title}**\n\n{body}"
        delivered = 0
        for chat_id in self.chat_ids:
            future = asyncio.run_coroutine_threadsafe(
                send_markdown(self.bot, text, chat_id=chat_id), self.loop
            )
            try:
                future.result(timeout=self.timeout)
                delivered += 1
            except TimeoutError:
                future.cancel()
                logger.error(f"Timed out sending reminder {source_id} to chat {chat_id}")
            except Exception as e:
                logger.error(f"Failed to send reminder {source_id} to chat {chat_id}: {e}")

        if not delivered:
            raise DeliveryError(f"Reminder {source_id} was not delivered to any chat")
