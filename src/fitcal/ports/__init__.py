"""Ports - interfaces/protocols for external dependencies."""

from .record_store import RecordStore
from .notifier import Notifier

__all__ = [
    "RecordStore",
    "Notifier",
]
