"""Reminder timing state machine."""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum

from fitcal.ports.notifier import Notifier

from .errors import DeliveryError, NotFound
from .models import Client, Session
from .store import SessionStore

logger = logging.getLogger(__name__)

REMINDER_TITLE = "Training reminder"
REMINDER_ICON = "assets/icons/dumbbell-icon.png"
DEFAULT_TOLERANCE = timedelta(seconds=60)


class ReminderState(Enum):
    """
    Reminder lifecycle for one session.

    PENDING -> DUE -> FIRED. EXPIRED is where a session ends up when it
    started before its reminder could fire; it never fires.
    """

    PENDING = "pending"
    DUE = "due"
    FIRED = "fired"
    EXPIRED = "expired"


def reminder_state(
    session: Session,
    now: datetime,
    tolerance: timedelta = DEFAULT_TOLERANCE,
) -> ReminderState:
    """
    Work out where a session's reminder stands at `now`.

    A session is DUE once its notification time has passed and it hasn't
    started yet, so a tick after a long gap still catches it. It is also DUE
    when `now` is within `tolerance` of the notification time, for pollers
    that tick slightly early.
    """
    if session.notification_sent:
        return ReminderState.FIRED
    if now >= session.start:
        return ReminderState.EXPIRED

    notify_at = session.notification_time
    if notify_at <= now:
        return ReminderState.DUE
    if abs(now - notify_at) < tolerance:
        return ReminderState.DUE
    return ReminderState.PENDING


@dataclass
class Reminder:
    """A reminder message ready for delivery."""

    title: str
    body: str
    source_id: str
    icon_ref: str = REMINDER_ICON

    @classmethod
    def for_session(cls, session: Session, client: Client) -> "Reminder":
        return cls(
            title=REMINDER_TITLE,
            body=f"Training with {client.name} in {session.lead_minutes} minutes ({session.format_time()})",
            source_id=session.id,
        )


class ReminderScheduler:
    """
    Fires at most one reminder per session.

    tick() can be called at any cadence. With require_confirmation off, a
    session is marked sent before delivery is attempted, and stays sent even
    if delivery fails. With it on, the session is marked only after the
    notifier succeeds, so a failed delivery leaves it DUE for the next tick.
    """

    def __init__(
        self,
        store: SessionStore,
        notifier: Notifier,
        tolerance: timedelta = DEFAULT_TOLERANCE,
        require_confirmation: bool = False,
    ):
        self.store = store
        self.notifier = notifier
        self.tolerance = tolerance
        self.require_confirmation = require_confirmation

    def due(self, now: datetime) -> list[Session]:
        """Sessions whose reminder should fire at `now`."""
        return [
            s
            for s in self.store.list_sessions()
            if reminder_state(s, now, self.tolerance) == ReminderState.DUE
        ]

    def tick(self, now: datetime) -> list[Session]:
        """Fire every due reminder. Returns the sessions marked as sent."""
        fired = []
        for session in self.due(now):
            try:
                client = self.store.get_client(session.client_id)
            except NotFound:
                logger.warning(f"Session {session.id} has no client {session.client_id}, skipping reminder")
                continue

            reminder = Reminder.for_session(session, client)
            if self.require_confirmation:
                if not self._deliver(reminder):
                    continue
                fired.append(self.store.update_session(replace(session, notification_sent=True)))
            else:
                # Marked sent before delivery, so each reminder goes out at most once
                fired.append(self.store.update_session(replace(session, notification_sent=True)))
                self._deliver(reminder)
            logger.info(f"Reminder sent for session {session.id} ({client.name} at {session.format_time()})")
        return fired

    def _deliver(self, reminder: Reminder) -> bool:
        """Hand a reminder to the notifier. Returns whether to mark it sent."""
        try:
            self.notifier.deliver(reminder.title, reminder.body, reminder.source_id, reminder.icon_ref)
        except DeliveryError as e:
            if self.require_confirmation:
                logger.error(f"Reminder for session {reminder.source_id} not delivered, will retry: {e}")
                return False
            logger.error(f"Reminder for session {reminder.source_id} not delivered: {e}")
        return True
