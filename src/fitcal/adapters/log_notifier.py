"""Logging notifier adapter."""

import logging

logger = logging.getLogger(__name__)


class LogNotifier:
    """
    Notifier that writes reminders to the log.

    Implements Notifier protocol. Used when no delivery platform is configured.
    """

    def __init__(self):
        self.delivered: list[tuple[str, str, str]] = []

    def deliver(self, title: str, body: str, source_id: str, icon_ref: str) -> None:
        logger.info(f"{title}: {body} [{source_id}]")
        self.delivered.append((title, body, source_id))
