"""Engine construction and schema creation for the sqlite storage backend"""

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from blocknote.crud.tables import DocumentRow  # noqa: F401  (registers the table)


MEMORY_URLS = {"sqlite://", "sqlite:///:memory:"}


def make_engine(db_url: str) -> Engine:
    """Create an engine; in-memory sqlite shares one connection across threads."""
    if db_url in MEMORY_URLS:
        return create_engine(db_url, echo=False, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}
    return create_engine(db_url, echo=False, connect_args=connect_args)


def init_db(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)


def reset_db(engine: Engine) -> None:
    """Drop and recreate all tables."""
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
