"""Half-open time intervals."""

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class TimeInterval:
    """A time range that includes its start and excludes its end."""

    start: datetime
    end: datetime

    @classmethod
    def from_duration(cls, start: datetime, minutes: int) -> "TimeInterval":
        return cls(start=start, end=start + timedelta(minutes=minutes))

    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() / 60)

    def format(self) -> str:
        return f"{self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')} ({self.duration_minutes()} min)"

    def contains(self, instant: datetime) -> bool:
        """Check if an instant falls within this interval."""
        return self.start <= instant < self.end

    def overlaps(self, other: "TimeInterval") -> bool:
        """Check if this interval overlaps another. Touching ends don't count."""
        return not (self.end <= other.start or self.start >= other.end)
