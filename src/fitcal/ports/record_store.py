"""Key/value persistence interface."""

from typing import Protocol


class RecordStore(Protocol):
    """Interface for loading and saving whole record collections."""

    def load(self, collection: str) -> list[dict]:
        """Load every record of a collection. Returns [] if it doesn't exist."""
        ...

    def save(self, collection: str, records: list[dict]) -> None:
        """Replace a collection with the given records."""
        ...
