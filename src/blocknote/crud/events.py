"""Change notification channel: observers receive an event after every store mutation"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional
from uuid import UUID

from blocknote.core.models import Document


logger = logging.getLogger(__name__)


class ChangeKind(str, Enum):
    created = "created"
    updated = "updated"
    tagged = "tagged"
    archived = "archived"
    unarchived = "unarchived"
    deleted = "deleted"


@dataclass(frozen=True)
class ChangeEvent:
    """Post-mutation snapshot; deleted events carry only the id."""
    kind: ChangeKind
    document_id: UUID
    document: Optional[Document] = None


Subscriber = Callable[[ChangeEvent], None]


class ChangeNotifier:
    def __init__(self):
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register callback; returns a function that unregisters it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def emit(self, event: ChangeEvent) -> None:
        """Deliver event to every subscriber; a failing subscriber is logged and skipped."""
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception("Change subscriber %r failed on %s event", callback, event.kind.value)
