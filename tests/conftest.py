"""Shared fixtures: a fixed day, an in-memory store and record factories."""

from datetime import date, datetime, time

import pytest

from fitcal.adapters.memory_store import MemoryRecordStore
from fitcal.core.models import Client, Session, TrainingType
from fitcal.core.store import SessionStore


@pytest.fixture
def today():
    return date(2025, 1, 15)


@pytest.fixture
def at(today):
    """Build a datetime on `today` from hour and minute."""
    def _at(hour: int, minute: int = 0) -> datetime:
        return datetime.combine(today, time(hour, minute))
    return _at


@pytest.fixture
def records():
    return MemoryRecordStore()


@pytest.fixture
def store(records):
    return SessionStore(records)


@pytest.fixture
def make_client(store):
    """Factory for stored clients."""
    def _make(name: str = "Anna", module_count: int | None = None) -> Client:
        if module_count is None:
            client = Client(name=name, phone="+7 900 000-00-00")
        else:
            client = Client(name=name, training_type=TrainingType.MODULE, module_count=module_count)
        return store.add_client(client)
    return _make


@pytest.fixture
def make_session(store, make_client):
    """Factory for stored sessions. Creates a client when none is given."""
    def _make(start: datetime, duration: int = 60, lead: int = 60, client: Client | None = None) -> Session:
        client = client or make_client()
        return store.add_session(
            Session(client_id=client.id, start=start, duration=duration, lead_minutes=lead)
        )
    return _make


class FlakyRecordStore(MemoryRecordStore):
    """Memory record store whose writes to chosen collections fail."""

    def __init__(self):
        super().__init__()
        self.failing: set[str] = set()

    def save(self, collection, records):
        if collection in self.failing:
            raise OSError("disk full")
        super().save(collection, records)


@pytest.fixture
def flaky_records():
    return FlakyRecordStore()
