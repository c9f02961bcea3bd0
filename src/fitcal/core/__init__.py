"""Scheduling core - booking, availability, ledger and reminder logic."""

from .errors import SchedulingError, NotFound, InvalidInput, DeliveryError
from .interval import TimeInterval
from .models import ALLOWED_DURATIONS, Client, Session, TrainingType
from .store import SessionStore
from .availability import AvailabilityEngine, OperatingWindow, SlotCheck, SlotStatus
from .ledger import ModuleLedger, LedgerReport
from .reminders import ReminderScheduler, ReminderState, reminder_state
from .calendar import DayCell, CellKind, day_schedule, client_history, client_schedule

__all__ = [
    # Errors
    "SchedulingError",
    "NotFound",
    "InvalidInput",
    "DeliveryError",
    # Records
    "TimeInterval",
    "ALLOWED_DURATIONS",
    "Client",
    "Session",
    "TrainingType",
    "SessionStore",
    # Availability
    "AvailabilityEngine",
    "OperatingWindow",
    "SlotCheck",
    "SlotStatus",
    # Ticking
    "ModuleLedger",
    "LedgerReport",
    "ReminderScheduler",
    "ReminderState",
    "reminder_state",
    # Views
    "DayCell",
    "CellKind",
    "day_schedule",
    "client_history",
    "client_schedule",
]
