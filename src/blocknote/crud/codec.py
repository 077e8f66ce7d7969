"""Record codec: Document <-> JSON-compatible dicts with stable camelCase field names"""

import logging
from typing import Iterable

from blocknote.core.errors import ValidationError
from blocknote.core.models import Document, build
from blocknote.crud.storage import Record


logger = logging.getLogger(__name__)


def to_record(doc: Document) -> Record:
    return doc.model_dump(mode="json", by_alias=True)


def from_record(record: Record) -> Document:
    """Decode one record. Raises ValidationError if it does not describe a valid Document."""
    if not isinstance(record, dict):
        raise ValidationError(f"expected a mapping, got {type(record).__name__}")
    return build(Document, record)


def encode_collection(docs: Iterable[Document]) -> list[Record]:
    return [to_record(d) for d in docs]


def decode_collection(records: Iterable[Record]) -> list[Document]:
    """Decode records in order, skipping (and logging) any that are invalid or duplicated."""
    docs: list[Document] = []
    seen = set()
    for position, record in enumerate(records):
        try:
            doc = from_record(record)
        except ValidationError as e:
            logger.warning("Skipping undecodable document record %d: %s", position, e)
            continue
        if doc.id in seen:
            logger.warning("Skipping duplicate document record %d: %s", position, doc.id)
            continue
        seen.add(doc.id)
        docs.append(doc)
    return docs
