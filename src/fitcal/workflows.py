"""Shared workflow layer between CLI, ticker and Telegram.

Each function takes its collaborators explicitly and an injected `now`
where time matters, so callers decide which clock to use.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .adapters.json_store import JsonFileRecordStore
from .config import Config, operating_window
from .core.availability import AvailabilityEngine, SlotStatus
from .core.errors import InvalidInput
from .core.ledger import LedgerReport, ModuleLedger
from .core.models import Client, Session, TrainingType
from .core.reminders import ReminderScheduler
from .core.store import SessionStore
from .ports.notifier import Notifier

logger = logging.getLogger(__name__)


def open_store(config: Config) -> SessionStore:
    """Open the session store over the configured data directory."""
    return SessionStore(JsonFileRecordStore(config.data_path), durations=tuple(config.durations))


def get_engine(store: SessionStore, config: Config) -> AvailabilityEngine:
    return AvailabilityEngine(store, operating_window(config))


# ============== Clients ==============


def create_client(
    store: SessionStore,
    name: str,
    phone: str = "",
    goals: str = "",
    notes: str = "",
    module_count: int | None = None,
) -> Client:
    """Create a client. Passing a module count puts them on the module plan."""
    if module_count is None:
        client = Client(name=name, phone=phone, goals=goals, notes=notes)
    else:
        client = Client(
            name=name,
            phone=phone,
            goals=goals,
            notes=notes,
            training_type=TrainingType.MODULE,
            module_count=module_count,
        )
    client = store.add_client(client)
    logger.info(f"Added client {client.name} ({client.id})")
    return client


# ============== Booking ==============


@dataclass
class BookingResult:
    """Outcome of a booking request. Unbooked results carry the reason."""

    status: SlotStatus
    session: Session | None = None
    conflicts: list[Session] = field(default_factory=list)

    @property
    def booked(self) -> bool:
        return self.session is not None


def book_session(
    store: SessionStore,
    engine: AvailabilityEngine,
    client_id: str,
    start: datetime,
    duration: int,
    lead_minutes: int,
) -> BookingResult:
    """
    Book a session if the slot is free.

    Raises NotFound for an unknown client and InvalidInput for a duration
    outside the allowed set or a non-positive lead time, before anything is
    stored. An overlapping or too-late slot is an ordinary unbooked result.
    """
    store.get_client(client_id)
    if duration not in engine.window.durations:
        raise InvalidInput(
            f"Duration must be one of {', '.join(map(str, engine.window.durations))} minutes, got {duration}"
        )
    if lead_minutes <= 0:
        raise InvalidInput(f"Reminder lead time must be positive, got {lead_minutes}")

    check = engine.check(start, duration)
    if not check.available:
        logger.info(f"Slot {check.interval.format()} on {start.date()} not bookable: {check.status.value}")
        return BookingResult(status=check.status, conflicts=check.conflicts)

    session = store.add_session(
        Session(client_id=client_id, start=start, duration=duration, lead_minutes=lead_minutes)
    )
    logger.info(f"Booked session {session.id} for client {client_id} at {start.isoformat()}")
    return BookingResult(status=SlotStatus.AVAILABLE, session=session)


# ============== Ticking ==============


@dataclass
class TickReport:
    """What one driver tick did."""

    ledger: LedgerReport
    reminded: list[Session]


def run_tick(store: SessionStore, notifier: Notifier, config: Config, now: datetime) -> TickReport:
    """Advance the ledger, then fire due reminders.

    The store is reloaded first, so a long-running driver works on what is
    on disk now rather than on what it loaded at startup.
    """
    store.reload()
    ledger = ModuleLedger(store)
    reminders = ReminderScheduler(
        store,
        notifier,
        tolerance=timedelta(seconds=config.reminder_tolerance_seconds),
        require_confirmation=config.require_delivery_confirmation,
    )
    report = TickReport(ledger=ledger.tick(now), reminded=reminders.tick(now))
    if report.ledger.deducted or report.reminded:
        logger.info(
            f"Tick at {now.isoformat(timespec='minutes')}: "
            f"{len(report.ledger.deducted)} deducted, {len(report.reminded)} reminded"
        )
    return report
