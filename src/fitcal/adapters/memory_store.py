"""In-memory persistence adapter."""

import copy


class MemoryRecordStore:
    """
    Dict-backed record storage.

    Implements RecordStore protocol. Used for tests and dry runs.
    """

    def __init__(self, initial: dict[str, list[dict]] | None = None):
        self.collections: dict[str, list[dict]] = copy.deepcopy(initial or {})
        self.saves = 0

    def load(self, collection: str) -> list[dict]:
        return copy.deepcopy(self.collections.get(collection, []))

    def save(self, collection: str, records: list[dict]) -> None:
        self.collections[collection] = copy.deepcopy(records)
        self.saves += 1
