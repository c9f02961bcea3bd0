"""Bookable slot discovery - pure logic over a SessionStore."""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum

from .interval import TimeInterval
from .models import ALLOWED_DURATIONS, Session
from .store import SessionStore


@dataclass(frozen=True)
class OperatingWindow:
    """Daily hours in which sessions can be booked."""

    open_time: time = time(10, 0)
    close_time: time = time(20, 0)
    slot_minutes: int = 30
    durations: tuple[int, ...] = ALLOWED_DURATIONS

    def __post_init__(self):
        if self.open_time >= self.close_time:
            raise ValueError(f"Opening time {self.open_time} must be before closing time {self.close_time}")
        if self.slot_minutes <= 0:
            raise ValueError(f"slot_minutes must be positive, got {self.slot_minutes}")

    def opening(self, day: date) -> datetime:
        return datetime.combine(day, self.open_time)

    def closing(self, day: date) -> datetime:
        return datetime.combine(day, self.close_time)


class SlotStatus(Enum):
    AVAILABLE = "available"
    CONFLICT = "conflict"
    AFTER_CLOSING = "after_closing"
    INVALID_DURATION = "invalid_duration"


@dataclass
class SlotCheck:
    """Result of checking one start time and duration."""

    start: datetime
    duration: int
    status: SlotStatus
    conflicts: list[Session] = field(default_factory=list)

    @property
    def available(self) -> bool:
        return self.status == SlotStatus.AVAILABLE

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval.from_duration(self.start, self.duration)


@dataclass
class OpenSlot:
    """A grid start time with the durations that can still be booked there."""

    start: datetime
    durations: list[int]

    def format(self) -> str:
        return f"{self.start.strftime('%H:%M')} ({', '.join(str(d) for d in self.durations)} min)"


class AvailabilityEngine:
    """
    Decides which session durations can be booked at a given start time.

    A duration is bookable when the session ends no later than the closing
    boundary and overlaps no stored session. Durations are checked
    independently and back-to-back sessions are allowed.
    """

    def __init__(self, store: SessionStore, window: OperatingWindow | None = None):
        self.store = store
        self.window = window or OperatingWindow()

    def closing_boundary(self, start: datetime) -> datetime:
        """The closing time on the day a session starts."""
        return self.window.closing(start.date())

    def check(self, start: datetime, duration: int) -> SlotCheck:
        """Check a single start time and duration."""
        if duration not in self.window.durations:
            return SlotCheck(start, duration, SlotStatus.INVALID_DURATION)

        interval = TimeInterval.from_duration(start, duration)
        if interval.end > self.closing_boundary(start):
            return SlotCheck(start, duration, SlotStatus.AFTER_CLOSING)

        conflicts = self.store.find_conflicts(interval)
        if conflicts:
            return SlotCheck(start, duration, SlotStatus.CONFLICT, conflicts)
        return SlotCheck(start, duration, SlotStatus.AVAILABLE)

    def available_durations(self, start: datetime) -> list[int]:
        """Durations (ascending) for which a session starting at `start` is bookable."""
        return [d for d in sorted(self.window.durations) if self.check(start, d).available]

    def is_bookable(self, start: datetime) -> bool:
        return bool(self.available_durations(start))

    def slot_starts(self, day: date) -> list[datetime]:
        """Grid start times within the operating window."""
        starts = []
        current = self.window.opening(day)
        closing = self.window.closing(day)
        step = timedelta(minutes=self.window.slot_minutes)
        while current < closing:
            starts.append(current)
            current += step
        return starts

    def open_slots(self, day: date) -> list[OpenSlot]:
        """Every grid start on a day where at least one duration is bookable."""
        slots = []
        for start in self.slot_starts(day):
            durations = self.available_durations(start)
            if durations:
                slots.append(OpenSlot(start=start, durations=durations))
        return slots
