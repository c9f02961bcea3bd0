"""JSON file persistence adapter."""

import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class JsonFileRecordStore:
    """
    File-based record storage.

    Implements RecordStore protocol. Each collection is one JSON array in
    `<data_dir>/<collection>.json`, replaced atomically on every save.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).expanduser()
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    def load(self, collection: str) -> list[dict]:
        """Load every record of a collection. Returns [] if it doesn't exist."""
        path = self._path_for(collection)
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse {path}: {e}")
            return []
        if not isinstance(data, list):
            logger.error(f"Expected a list in {path}, got {type(data).__name__}")
            return []
        return data

    def save(self, collection: str, records: list[dict]) -> None:
        """Replace a collection with the given records."""
        path = self._path_for(collection)
        fd, tmp = tempfile.mkstemp(dir=self.data_dir, prefix=f".{collection}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(records, f, indent=2)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
