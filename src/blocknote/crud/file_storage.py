"""JSON file storage: atomic whole-collection writes with an optional backup copy"""

import json
import logging
import os
import shutil
from pathlib import Path

from blocknote.core.errors import PersistenceError
from blocknote.crud.storage import Record, Storage


logger = logging.getLogger(__name__)


class JsonFileStorage(Storage):
    """Stores the collection as a pretty-printed JSON array in a single file."""

    def __init__(self, path: Path | str, backup: bool = True):
        self.path = Path(path)
        self.backup = backup

    @property
    def backup_path(self) -> Path:
        return self.path.with_name(f"{self.path.name}.backup")

    def load(self) -> list[Record]:
        if not self.path.exists():
            logger.info("No collection file at %s", self.path)
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Failed to read {self.path}: {e}") from e
        if not isinstance(data, list):
            raise PersistenceError(f"Failed to read {self.path}: expected a JSON array, got {type(data).__name__}")
        return data

    def save(self, records: list[Record]) -> None:
        """Write to a temporary sibling then rename over the target."""
        tmp = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")
            if self.backup and self.path.exists():
                shutil.copy2(self.path, self.backup_path)
            os.replace(tmp, self.path)
        except (OSError, TypeError, ValueError) as e:
            tmp.unlink(missing_ok=True)
            raise PersistenceError(f"Failed to write {self.path}: {e}") from e
        logger.debug("Saved %d document(s) to %s", len(records), self.path)
