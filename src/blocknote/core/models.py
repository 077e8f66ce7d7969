"""Block and document value models"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional, TypeVar
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from blocknote.core.errors import ValidationError


MAX_HEADING_LEVEL = 6
DEFAULT_AUTHOR = "User"

M = TypeVar("M", bound=BaseModel)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_tag(tag: str) -> str:
    """Lowercase a label and collapse internal whitespace to single spaces."""
    if not isinstance(tag, str):
        raise ValidationError(f"tag must be a string, got {type(tag).__name__}")
    label = " ".join(tag.lower().split())
    if not label:
        raise ValidationError("tag must not be empty")
    return label


class BlockType(str, Enum):
    """Restrict the types of content blocks to a predefined set of elements"""
    heading = "heading"
    paragraph = "paragraph"
    list = "list"
    quote = "quote"
    code = "code"


# --- per-variant payload rules ---

def _allow_keys(metadata: dict[str, Any], *keys: str) -> None:
    extra = set(metadata) - set(keys)
    if extra:
        raise ValueError(f"unexpected metadata keys: {sorted(extra)}")


def _plain_rule(content: str, metadata: dict[str, Any]) -> dict[str, Any]:
    _allow_keys(metadata)
    return {}


def _heading_rule(content: str, metadata: dict[str, Any]) -> dict[str, Any]:
    _allow_keys(metadata, "level")
    level = metadata.get("level", 1)
    if isinstance(level, bool) or not isinstance(level, int) or not 1 <= level <= MAX_HEADING_LEVEL:
        raise ValueError(f"heading level must be an integer in 1..{MAX_HEADING_LEVEL}, got {level!r}")
    if "\n" in content:
        raise ValueError("heading content must be a single line")
    return {"level": level}


def _list_rule(content: str, metadata: dict[str, Any]) -> dict[str, Any]:
    _allow_keys(metadata, "ordered")
    ordered = metadata.get("ordered", False)
    if not isinstance(ordered, bool):
        raise ValueError(f"list 'ordered' flag must be a boolean, got {ordered!r}")
    return {"ordered": ordered}


def _code_rule(content: str, metadata: dict[str, Any]) -> dict[str, Any]:
    _allow_keys(metadata, "language")
    language = metadata.get("language")
    if language is not None and not isinstance(language, str):
        raise ValueError(f"code language must be a string, got {language!r}")
    return {"language": language} if language else {}


BLOCK_RULES: dict[BlockType, Callable[[str, dict[str, Any]], dict[str, Any]]] = {
    BlockType.heading:   _heading_rule,
    BlockType.paragraph: _plain_rule,
    BlockType.list:      _list_rule,
    BlockType.quote:     _plain_rule,
    BlockType.code:      _code_rule,
}


class Block(BaseModel):
    """The fundamental unit of ordered content within a document.

    Immutable: editing a block yields a new Block carrying the same id.
    metadata is validated and normalized by the rule registered for type.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: UUID = Field(default_factory=uuid4)
    type: BlockType = BlockType.paragraph
    content: str = ""
    order: int = Field(default=0, ge=0, description="Position of the block within the document")
    metadata: dict[str, Any] = Field(default_factory=dict, validate_default=True)

    @field_validator("metadata")
    @classmethod
    def _check_payload(cls, value: dict[str, Any], info: ValidationInfo) -> dict[str, Any]:
        block_type = info.data.get("type")
        if block_type is None:
            return value
        return BLOCK_RULES[block_type](info.data.get("content", ""), value)

    @property
    def is_empty(self) -> bool:
        return not self.content.strip()

    @property
    def word_count(self) -> int:
        return len(self.content.split())


class Cursor(BaseModel):
    """Last known edit position: a block id plus a character offset into its content."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True, extra="ignore")

    block_id: UUID
    offset: int = Field(default=0, ge=0)


_TIMESTAMP_KEYS = {"created_at", "createdAt", "updated_at", "updatedAt"}


def _default_blocks() -> tuple[Block, ...]:
    return (Block(type=BlockType.paragraph),)


class Document(BaseModel):
    """The unit of persistence: ordered blocks plus metadata, cursor, and tags.

    Field names serialize in camelCase (createdAt, updatedAt, cursor.blockId).
    Unknown fields are ignored on read; missing optional fields take defaults.
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: UUID = Field(default_factory=uuid4)
    version: UUID = Field(default_factory=uuid4)
    blocks: tuple[Block, ...] = Field(default_factory=_default_blocks, min_length=1)
    cursor: Optional[Cursor] = None
    tags: tuple[str, ...] = ()
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    author: str = DEFAULT_AUTHOR
    active: bool = True

    @model_validator(mode="before")
    @classmethod
    def _default_timestamps(cls, data: Any) -> Any:
        """Fill a missing timestamp from its sibling so updatedAt >= createdAt holds on read."""
        if not isinstance(data, dict):
            return data
        created = data.get("created_at", data.get("createdAt"))
        updated = data.get("updated_at", data.get("updatedAt"))
        if created is None and updated is None:
            return data
        data = {k: v for k, v in data.items() if k not in _TIMESTAMP_KEYS}
        data["created_at"] = created if created is not None else updated
        data["updated_at"] = updated if updated is not None else created
        return data

    @field_validator("created_at", "updated_at")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple, set, frozenset)):
            raise ValueError(f"tags must be a list of strings, got {type(value).__name__}")
        return tuple(sorted({normalize_tag(t) for t in value}))

    @field_validator("blocks")
    @classmethod
    def _order_blocks(cls, blocks: tuple[Block, ...]) -> tuple[Block, ...]:
        ids = [b.id for b in blocks]
        if len(set(ids)) != len(ids):
            raise ValueError("block ids must be unique within a document")
        # Stable sort: ties keep sequence order, then renumber to the index.
        ordered = sorted(blocks, key=lambda b: b.order)
        return tuple(
            b if b.order == i else b.model_copy(update={"order": i})
            for i, b in enumerate(ordered)
        )

    @model_validator(mode="after")
    def _check_invariants(self) -> "Document":
        if self.updated_at < self.created_at:
            raise ValueError("updatedAt must not precede createdAt")
        if self.cursor is not None:
            block = next((b for b in self.blocks if b.id == self.cursor.block_id), None)
            if block is None:
                raise ValueError(f"cursor references missing block {self.cursor.block_id}")
            if self.cursor.offset > len(block.content):
                raise ValueError(
                    f"cursor offset {self.cursor.offset} exceeds block length {len(block.content)}"
                )
        return self


def build(model: type[M], data: Any) -> M:
    """Validate data into model, translating pydantic failures into ValidationError."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(p) for p in first["loc"]) or model.__name__
        raise ValidationError(f"{loc}: {first['msg']}") from e
