"""Shared fixtures for crud unit tests"""

import threading

import pytest

from blocknote.core.errors import PersistenceError
from blocknote.crud.database import make_engine
from blocknote.crud.storage import MemoryStorage
from blocknote.crud.store import DocumentStore


class RecordingTagger:
    """Tag deriver that records every text it sees."""

    def __init__(self):
        self.calls: list[str] = []

    def derive_tags(self, text):
        self.calls.append(text)
        return {"recorded"}


class GatedTagger:
    """Tag deriver that blocks until released, holding a derivation in flight."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()

    def derive_tags(self, text):
        self.started.set()
        self.release.wait(timeout=5)
        return {"late"}


class FailingSaveStorage(MemoryStorage):
    def save(self, records):
        raise PersistenceError("disk full")


class FailingLoadStorage(MemoryStorage):
    def load(self):
        raise PersistenceError("unreadable")


@pytest.fixture(name="storage")
def storage_fixture():
    return MemoryStorage()


@pytest.fixture(name="store")
def store_fixture(storage):
    """Store with inline tagging: derived tags are applied before create/update return."""
    with DocumentStore(storage, async_tagging=False) as s:
        yield s


@pytest.fixture(name="async_store")
def async_store_fixture(storage):
    """Store with the background tagging worker."""
    with DocumentStore(storage) as s:
        yield s


@pytest.fixture(name="recording_tagger")
def recording_tagger_fixture():
    return RecordingTagger()


@pytest.fixture(name="gated_tagger")
def gated_tagger_fixture():
    tagger = GatedTagger()
    yield tagger
    tagger.release.set()


@pytest.fixture(name="failing_save_storage")
def failing_save_storage_fixture():
    return FailingSaveStorage()


@pytest.fixture(name="failing_load_storage")
def failing_load_storage_fixture():
    return FailingLoadStorage()


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine shared across threads."""
    return make_engine("sqlite://")
