"""SQL storage: the collection as rows of JSON payloads, replaced in one transaction"""

import logging

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from blocknote.core.errors import PersistenceError
from blocknote.crud.database import init_db
from blocknote.crud.storage import Record, Storage
from blocknote.crud.tables import DocumentRow


logger = logging.getLogger(__name__)


class SqlStorage(Storage):
    """Tables are created on first load or save, so an unreachable database surfaces as PersistenceError."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._schema_ready = False

    def _ensure_schema(self) -> None:
        if not self._schema_ready:
            init_db(self.engine)
            self._schema_ready = True

    def load(self) -> list[Record]:
        try:
            self._ensure_schema()
            with Session(self.engine) as session:
                rows = session.exec(select(DocumentRow).order_by(DocumentRow.position)).all()
                return [dict(r.payload) for r in rows]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load documents: {e}") from e

    def save(self, records: list[Record]) -> None:
        try:
            self._ensure_schema()
            with Session(self.engine) as session:
                for row in session.exec(select(DocumentRow)).all():
                    session.delete(row)
                session.flush()
                for position, record in enumerate(records):
                    session.add(DocumentRow(id=str(record["id"]), position=position, payload=record))
                session.commit()
        except (SQLAlchemyError, KeyError) as e:
            raise PersistenceError(f"Failed to save documents: {e}") from e
        logger.debug("Saved %d document(s) to %s", len(records), self.engine.url)
