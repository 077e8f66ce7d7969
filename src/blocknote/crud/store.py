"""Document store: serialized CRUD over the canonical collection, persistence, and background tagging

All mutations run under one re-entrant lock around read-modify-persist, so
readers never observe a half-applied change. Tag derivation is the only work
done off the caller's path: it runs on a single background worker and
re-enters the store through add_tags.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Iterable, Optional, Sequence
from uuid import UUID

from blocknote.config import Settings
from blocknote.core.document import document_text, generated_title, new_document, replace_blocks, revise
from blocknote.core.errors import NotFoundError, PersistenceError, ValidationError
from blocknote.core.models import DEFAULT_AUTHOR, Block, Cursor, Document, normalize_tag, utcnow
from blocknote.core.stats import CollectionStats, collection_stats
from blocknote.core.tagging import KeywordTagDeriver, TagDeriver
from blocknote.core.utils.hashing import sha256
from blocknote.crud.backends import open_storage
from blocknote.crud.codec import decode_collection, encode_collection
from blocknote.crud.events import ChangeEvent, ChangeKind, ChangeNotifier, Subscriber
from blocknote.crud.storage import Storage


logger = logging.getLogger(__name__)

DocumentId = UUID | str


def _as_uuid(value: DocumentId) -> UUID:
    """Coerce an id; a malformed id cannot exist in the store, so it is NotFound."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError as e:
        raise NotFoundError(f"Document {value} not found") from e


def _matches(doc: Document, query: str) -> bool:
    """Case-insensitive substring match against title, block content, and tags."""
    q = query.lower()
    return (
        q in generated_title(doc).lower()
        or any(q in b.content.lower() for b in doc.blocks)
        or any(q in t for t in doc.tags)
    )


class DocumentStore:
    """Owns the authoritative in-memory collection; callers only ever see copies."""

    def __init__(
        self,
        storage: Storage,
        tagger: Optional[TagDeriver] = None,
        author: str = DEFAULT_AUTHOR,
        async_tagging: bool = True,
        ):
        self.storage = storage
        self.tagger = tagger if tagger is not None else KeywordTagDeriver()
        self.author = author
        self._lock = threading.RLock()
        self._docs: dict[UUID, Document] = {}
        self._tagged: dict[UUID, str] = {}
        self._notifier = ChangeNotifier()
        self._executor: Optional[ThreadPoolExecutor] = (
            ThreadPoolExecutor(max_workers=1, thread_name_prefix="blocknote-tagging")
            if async_tagging else None
        )
        self._pending: set[Future] = set()
        self._pending_lock = threading.Lock()
        self._load()

    @classmethod
    def from_settings(cls, settings: Settings, tagger: Optional[TagDeriver] = None) -> DocumentStore:
        return cls(
            open_storage(settings),
            tagger=tagger,
            author=settings.author,
            async_tagging=settings.async_tagging,
        )

    def __enter__(self) -> DocumentStore:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._docs)

    # --- persistence ---

    def _load(self) -> None:
        """Read the whole collection once; any load failure leaves it empty."""
        try:
            records = self.storage.load()
        except PersistenceError as e:
            logger.warning("Falling back to an empty collection: %s", e)
            return
        for doc in decode_collection(records):
            self._docs[doc.id] = doc
        logger.info("Loaded %d document(s)", len(self._docs))

    def _persist(self) -> None:
        """Overwrite storage with the whole collection; in-memory state stays authoritative on failure."""
        try:
            self.storage.save(encode_collection(self._docs.values()))
        except PersistenceError as e:
            logger.error("Save failed, keeping in-memory state: %s", e)

    def _commit(self, doc: Document, kind: ChangeKind) -> Document:
        """Install doc as canonical, persist, and notify. Caller holds the lock."""
        self._docs[doc.id] = doc
        self._persist()
        self._notifier.emit(ChangeEvent(kind=kind, document_id=doc.id, document=doc.model_copy(deep=True)))
        return doc.model_copy(deep=True)

    def _require(self, doc_id: DocumentId) -> Document:
        doc = self._docs.get(_as_uuid(doc_id))
        if doc is None:
            raise NotFoundError(f"Document {doc_id} not found")
        return doc

    # --- queries ---

    def get(self, doc_id: DocumentId) -> Optional[Document]:
        """Return a copy of the document, or None if it does not exist."""
        with self._lock:
            try:
                return self._require(doc_id).model_copy(deep=True)
            except NotFoundError:
                return None

    def list(
        self,
        active: Optional[bool] = None,
        tag: Optional[str] = None,
        query: Optional[str] = None,
        ) -> list[Document]:
        """Return documents ordered by updatedAt, newest first.

        active filters on the archival flag (None = both), tag on tag membership,
        query on a case-insensitive substring of title, content, or tags.
        """
        with self._lock:
            docs = list(self._docs.values())
        if active is not None:
            docs = [d for d in docs if d.active == active]
        if tag is not None:
            label = normalize_tag(tag)
            docs = [d for d in docs if label in d.tags]
        if query:
            docs = [d for d in docs if _matches(d, query)]
        docs.sort(key=lambda d: d.updated_at, reverse=True)
        return [d.model_copy(deep=True) for d in docs]

    def search(self, query: str) -> list[Document]:
        return self.list(query=query)

    def stats(self, active: Optional[bool] = True) -> CollectionStats:
        return collection_stats(self.list(active=active))

    # --- mutations ---

    def create(
        self,
        initial_content: str = "",
        author: Optional[str] = None,
        blocks: Optional[Sequence[Block]] = None,
        ) -> Document:
        """Create, persist, and return a document, then schedule tagging.

        The document holds one paragraph of initial_content unless blocks is
        given, in which case it starts with those blocks and the cursor at the first.
        """
        doc = new_document(initial_content, author or self.author)
        if blocks:
            doc = replace_blocks(doc, blocks, Cursor(block_id=blocks[0].id))
        with self._lock:
            created = self._commit(doc, ChangeKind.created)
            self._schedule_tagging(doc)
        return created

    def update(self, document: Document) -> Document:
        """Replace a stored document's blocks and cursor (last writer wins).

        Tags, author, active flag, and createdAt are kept from the stored copy.
        Tagging is rescheduled only if the text changed since the last derivation.
        """
        with self._lock:
            current = self._require(document.id)
            doc = revise(current, blocks=list(document.blocks), cursor=document.cursor)
            updated = self._commit(doc, ChangeKind.updated)
            if self._tagged.get(doc.id) != sha256(document_text(doc)):
                self._schedule_tagging(doc)
        return updated

    def delete(self, doc_id: DocumentId) -> None:
        """Remove a document from the store and storage. Unknown ids are a no-op."""
        with self._lock:
            try:
                key = _as_uuid(doc_id)
            except NotFoundError:
                return
            if self._docs.pop(key, None) is None:
                return
            self._tagged.pop(key, None)
            self._persist()
            self._notifier.emit(ChangeEvent(kind=ChangeKind.deleted, document_id=key))

    def archive(self, doc_id: DocumentId) -> Document:
        return self._set_active(doc_id, False)

    def unarchive(self, doc_id: DocumentId) -> Document:
        return self._set_active(doc_id, True)

    def _set_active(self, doc_id: DocumentId, active: bool) -> Document:
        with self._lock:
            current = self._require(doc_id)
            if current.active == active:
                return current.model_copy(deep=True)
            doc = current.model_copy(update={
                "active": active,
                "updated_at": max(utcnow(), current.created_at),
            })
            return self._commit(doc, ChangeKind.unarchived if active else ChangeKind.archived)

    def add_tags(self, doc_id: DocumentId, tags: Iterable[str] | str) -> Document:
        """Union tags into the document's tag set; a new version only if the set grows."""
        if isinstance(tags, str):
            tags = [tags]
        elif not isinstance(tags, Iterable):
            raise ValidationError(f"tags must be a string or a list of strings, got {type(tags).__name__}")
        labels = {normalize_tag(t) for t in tags}
        with self._lock:
            current = self._require(doc_id)
            if labels <= set(current.tags):
                return current.model_copy(deep=True)
            doc = revise(current, tags=set(current.tags) | labels)
            return self._commit(doc, ChangeKind.tagged)

    # --- notifications ---

    def subscribe(self, callback: Subscriber):
        """Register an observer of ChangeEvents. Returns an unsubscribe function."""
        return self._notifier.subscribe(callback)

    # --- background tagging ---

    def _schedule_tagging(self, doc: Document) -> None:
        """Record the text being tagged and hand it to the worker (inline if there is none)."""
        text = document_text(doc)
        self._tagged[doc.id] = sha256(text)
        if self._executor is None:
            self._apply_derived_tags(doc.id, text)
            return
        future = self._executor.submit(self._apply_derived_tags, doc.id, text)
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._discard_pending)

    def _discard_pending(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    def _apply_derived_tags(self, doc_id: UUID, text: str) -> None:
        """Best effort: derivation failures and vanished documents add nothing."""
        try:
            tags = self.tagger.derive_tags(text)
        except Exception:
            logger.warning("Tag derivation failed for %s", doc_id, exc_info=True)
            return
        if not tags:
            return
        try:
            self.add_tags(doc_id, tags)
        except NotFoundError:
            logger.debug("Document %s deleted before tagging finished", doc_id)
        except ValidationError as e:
            logger.warning("Discarding invalid derived tags for %s: %s", doc_id, e)

    def wait_for_tagging(self, timeout: Optional[float] = None) -> bool:
        """Block until scheduled derivations finish. Returns False on timeout."""
        with self._pending_lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def close(self) -> None:
        """Drain the tagging worker; later derivations run inline."""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)
