"""Database table definition for the sqlite storage backend"""

from typing import Any

from sqlalchemy import JSON, Column, Text
from sqlmodel import Field, SQLModel


class DocumentRow(SQLModel, table=True):
    """One serialized document record; position keeps the collection order."""
    __tablename__ = "documents"
    id: str = Field(sa_column=Column(Text, primary_key=True))
    position: int = Field(..., index=True, nullable=False, description="Index within the stored collection")
    payload: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
