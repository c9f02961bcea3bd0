"""Adapters - I/O implementations of ports."""

from .json_store import JsonFileRecordStore
from .memory_store import MemoryRecordStore
from .log_notifier import LogNotifier
from .telegram_notifier import TelegramNotifier

__all__ = [
    "JsonFileRecordStore",
    "MemoryRecordStore",
    "LogNotifier",
    "TelegramNotifier",
]
