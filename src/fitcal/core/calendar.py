"""Calendar views over sessions - pure functions, rendering happens elsewhere."""

import calendar as stdcal
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from .availability import AvailabilityEngine
from .errors import NotFound
from .models import Session
from .store import SessionStore


class CellKind(Enum):
    SESSION_START = "session_start"
    CONTINUATION = "continuation"
    FREE = "free"
    UNAVAILABLE = "unavailable"


@dataclass
class DayCell:
    """One grid slot of the day view."""

    start: datetime
    kind: CellKind
    session: Session | None = None
    client_name: str = ""
    span: int = 1
    durations: list[int] = field(default_factory=list)

    def format(self) -> str:
        time_str = self.start.strftime("%H:%M")
        match self.kind:
            case CellKind.SESSION_START:
                hours = self.session.duration / 60
                return f"{time_str} - {self.client_name} ({hours:g} h)"
            case CellKind.CONTINUATION:
                return f"{time_str}   |"
            case CellKind.FREE:
                return f"{time_str}   free ({', '.join(str(d) for d in self.durations)} min)"
            case _:
                return f"{time_str}   -"


def day_schedule(store: SessionStore, engine: AvailabilityEngine, day: date) -> list[DayCell]:
    """
    Build the day view: one cell per grid slot in the operating window.

    A slot covered by a session is its start cell if the session begins there,
    otherwise a continuation. Free slots list the durations still bookable.
    """
    sessions = store.list_sessions()
    slot_minutes = engine.window.slot_minutes
    cells = []

    for start in engine.slot_starts(day):
        session = next((s for s in sessions if s.interval.contains(start)), None)

        if session is not None:
            if session.start == start:
                cells.append(
                    DayCell(
                        start=start,
                        kind=CellKind.SESSION_START,
                        session=session,
                        client_name=_client_name(store, session),
                        span=max(1, session.duration // slot_minutes),
                    )
                )
            else:
                cells.append(DayCell(start=start, kind=CellKind.CONTINUATION, session=session))
            continue

        durations = engine.available_durations(start)
        if durations:
            cells.append(DayCell(start=start, kind=CellKind.FREE, durations=durations))
        else:
            cells.append(DayCell(start=start, kind=CellKind.UNAVAILABLE))

    return cells


def _client_name(store: SessionStore, session: Session) -> str:
    try:
        return store.get_client(session.client_id).name
    except NotFound:
        return "(unknown client)"


def days_with_sessions(sessions: list[Session], year: int, month: int) -> set[date]:
    """Dates in a month that have at least one session."""
    return {s.start.date() for s in sessions if s.start.year == year and s.start.month == month}


def month_grid(year: int, month: int) -> list[list[date | None]]:
    """Monday-first weeks of a month; days outside the month are None."""
    cal = stdcal.Calendar(firstweekday=0)
    return [
        [d if d.month == month else None for d in week]
        for week in cal.monthdatescalendar(year, month)
    ]


def client_history(sessions: list[Session], now: datetime) -> list[Session]:
    """Sessions that have already started, newest first."""
    return sorted((s for s in sessions if s.start < now), key=lambda s: s.start, reverse=True)


@dataclass
class ScheduleEntry:
    session: Session
    status: str  # "past" or "upcoming"


def client_schedule(sessions: list[Session], now: datetime) -> list[ScheduleEntry]:
    """All sessions oldest first, each marked past or upcoming."""
    return [
        ScheduleEntry(session=s, status="past" if s.start < now else "upcoming")
        for s in sorted(sessions, key=lambda s: s.start)
    ]
