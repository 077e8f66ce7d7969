"""Storage collaborator contract: whole-collection load and save of document records"""

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


Record = dict[str, Any]


class Storage(ABC):
    """Persists the entire collection as one ordered sequence of records.

    save() replaces everything previously stored and is atomic at the
    collection granularity. Both methods raise PersistenceError on failure;
    load() returns [] when nothing has been stored yet.
    """

    @abstractmethod
    def load(self) -> list[Record]:
        raise NotImplementedError

    @abstractmethod
    def save(self, records: list[Record]) -> None:
        raise NotImplementedError


@dataclass
class MemoryStorage(Storage):
    _records: list[Record] = field(default_factory=list)

    def load(self) -> list[Record]:
        return copy.deepcopy(self._records)

    def save(self, records: list[Record]) -> None:
        self._records = copy.deepcopy(records)
