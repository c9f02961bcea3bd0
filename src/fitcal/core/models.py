"""Client and session records - pure data, no I/O."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from .interval import TimeInterval

ALLOWED_DURATIONS = (60, 90, 120)


def new_id() -> str:
    """Generate an opaque, unique record identifier."""
    return uuid.uuid4().hex


class TrainingType(str, Enum):
    """How a client pays for training."""

    SINGLE = "single"
    MODULE = "module"


@dataclass(frozen=True)
class Client:
    """A person receiving training, optionally on a prepaid module plan."""

    name: str
    phone: str = ""
    goals: str = ""
    notes: str = ""
    training_type: TrainingType = TrainingType.SINGLE
    module_count: int = 0
    id: str = field(default_factory=new_id)

    @property
    def is_module(self) -> bool:
        return self.training_type == TrainingType.MODULE

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "goals": self.goals,
            "notes": self.notes,
            "training_type": self.training_type.value,
            "module_count": self.module_count,
        }

    @classmethod
    def from_record(cls, data: dict) -> "Client":
        return cls(
            id=data["id"],
            name=data["name"],
            phone=data.get("phone", ""),
            goals=data.get("goals", ""),
            notes=data.get("notes", ""),
            training_type=TrainingType(data.get("training_type", "single")),
            module_count=int(data.get("module_count", 0)),
        )


@dataclass(frozen=True)
class Session:
    """A single scheduled training appointment.

    The end time is always derived from start and duration.
    """

    client_id: str
    start: datetime
    duration: int
    lead_minutes: int
    completed: bool = False
    module_deducted: bool = False
    notification_sent: bool = False
    id: str = field(default_factory=new_id)

    @property
    def end(self) -> datetime:
        return self.start + timedelta(minutes=self.duration)

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(start=self.start, end=self.end)

    @property
    def notification_time(self) -> datetime:
        """When the reminder for this session becomes due."""
        return self.start - timedelta(minutes=self.lead_minutes)

    def format_time(self) -> str:
        return self.start.strftime("%H:%M")

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "start": self.start.isoformat(),
            "duration": self.duration,
            "end": self.end.isoformat(),
            "lead_minutes": self.lead_minutes,
            "completed": self.completed,
            "module_deducted": self.module_deducted,
            "notification_sent": self.notification_sent,
        }

    @classmethod
    def from_record(cls, data: dict) -> "Session":
        # "end" is written for readers only; it is recomputed here
        return cls(
            id=data["id"],
            client_id=data["client_id"],
            start=datetime.fromisoformat(data["start"]),
            duration=int(data["duration"]),
            lead_minutes=int(data.get("lead_minutes", 0)),
            completed=bool(data.get("completed", False)),
            module_deducted=bool(data.get("module_deducted", False)),
            notification_sent=bool(data.get("notification_sent", False)),
        )
