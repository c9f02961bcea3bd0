"""Reminder delivery interface."""

from typing import Protocol


class Notifier(Protocol):
    """Interface for delivering a reminder on some platform."""

    def deliver(self, title: str, body: str, source_id: str, icon_ref: str) -> None:
        """Deliver a reminder. Raises DeliveryError on failure."""
        ...
