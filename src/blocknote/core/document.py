"""Pure document operations: every edit returns a new Document with a fresh version"""

from typing import Any, Iterable, Optional
from uuid import UUID, uuid4

from blocknote.core.blocks import edit_block, new_block
from blocknote.core.errors import NotFoundError, ValidationError
from blocknote.core.models import (
    DEFAULT_AUTHOR, Block, BlockType, Cursor, Document, build, utcnow,
)


TITLE_LENGTH = 50
WORDS_PER_MINUTE = 200


def new_document(content: str = "", author: str = DEFAULT_AUTHOR) -> Document:
    """Return a Document holding one paragraph block with the cursor at its start."""
    block = new_block(BlockType.paragraph, content)
    return build(Document, {
        "blocks": [block],
        "cursor": {"block_id": block.id, "offset": 0},
        "author": author,
    })


def _index_of(doc: Document, block_id: UUID) -> int:
    for i, block in enumerate(doc.blocks):
        if block.id == block_id:
            return i
    raise NotFoundError(f"Block {block_id} not found in document {doc.id}")


def find_block(doc: Document, block_id: UUID) -> Block:
    """Return the block with block_id. Raises NotFoundError if absent."""
    return doc.blocks[_index_of(doc, block_id)]


def revise(doc: Document, **changes: Any) -> Document:
    """Rebuild doc with changes applied, a new version, and a refreshed updatedAt."""
    data = dict(doc)
    data.update(changes)
    if "blocks" in data:
        data["blocks"] = [
            b if b.order == i else b.model_copy(update={"order": i})
            for i, b in enumerate(data["blocks"])
        ]
    data["version"] = uuid4()
    data["updated_at"] = max(utcnow(), doc.created_at)
    return build(Document, data)


def _clamped(cursor: Optional[Cursor], blocks: Iterable[Block]) -> Optional[Cursor]:
    """Keep cursor inside its block's content; drop it if the block is gone."""
    if cursor is None:
        return None
    for block in blocks:
        if block.id == cursor.block_id:
            if cursor.offset > len(block.content):
                return Cursor(block_id=block.id, offset=len(block.content))
            return cursor
    return None


def insert_block(doc: Document, after: Optional[UUID], block: Block) -> Document:
    """Insert block right after the block with id after, or at the start if after is None."""
    if any(b.id == block.id for b in doc.blocks):
        raise ValidationError(f"Block {block.id} already exists in document {doc.id}")
    index = 0 if after is None else _index_of(doc, after) + 1
    blocks = list(doc.blocks)
    blocks.insert(index, block)
    return revise(doc, blocks=blocks)


def remove_block(doc: Document, block_id: UUID) -> Document:
    """Remove a block; the last block is replaced with an empty paragraph.

    A cursor held by the removed block moves to the start of the following
    block, else the preceding one.
    """
    index = _index_of(doc, block_id)
    blocks = list(doc.blocks)
    del blocks[index]
    if not blocks:
        blocks = [new_block(BlockType.paragraph)]

    cursor = doc.cursor
    if cursor is not None and cursor.block_id == block_id:
        target = blocks[index] if index < len(blocks) else blocks[index - 1]
        cursor = Cursor(block_id=target.id, offset=0)
    return revise(doc, blocks=blocks, cursor=cursor)


def replace_block_content(doc: Document, block_id: UUID, content: str) -> Document:
    """Substitute a block's content in place, keeping its id and order."""
    index = _index_of(doc, block_id)
    blocks = list(doc.blocks)
    blocks[index] = edit_block(blocks[index], content=content)
    return revise(doc, blocks=blocks, cursor=_clamped(doc.cursor, blocks))


def change_block_type(
    doc: Document,
    block_id: UUID,
    block_type: BlockType | str,
    **metadata: Any,
    ) -> Document:
    """Re-type a block in place, validating its content against the new variant."""
    index = _index_of(doc, block_id)
    blocks = list(doc.blocks)
    blocks[index] = edit_block(blocks[index], block_type=block_type, metadata=metadata or None)
    return revise(doc, blocks=blocks)


def merge_with_previous(doc: Document, block_id: UUID) -> Document:
    """Append a block's content to its predecessor and drop it; cursor lands at the join."""
    index = _index_of(doc, block_id)
    if index == 0:
        raise ValidationError(f"Block {block_id} has no preceding block to merge into")
    blocks = list(doc.blocks)
    previous, current = blocks[index - 1], blocks[index]
    blocks[index - 1] = edit_block(previous, content=previous.content + current.content)
    del blocks[index]
    cursor = Cursor(block_id=previous.id, offset=len(previous.content))
    return revise(doc, blocks=blocks, cursor=cursor)


def move_block(doc: Document, block_id: UUID, new_index: int) -> Document:
    """Move a block to new_index, clamped to [0, len(blocks) - 1]."""
    index = _index_of(doc, block_id)
    blocks = list(doc.blocks)
    block = blocks.pop(index)
    new_index = max(0, min(new_index, len(doc.blocks) - 1))
    blocks.insert(new_index, block)
    return revise(doc, blocks=blocks)


def set_cursor(doc: Document, block_id: UUID, offset: int) -> Document:
    """Place the cursor. Raises ValidationError for an unknown block or out-of-range offset."""
    try:
        block = find_block(doc, block_id)
    except NotFoundError as e:
        raise ValidationError(str(e)) from e
    if offset < 0 or offset > len(block.content):
        raise ValidationError(
            f"Cursor offset {offset} outside 0..{len(block.content)} for block {block_id}"
        )
    return revise(doc, cursor=Cursor(block_id=block_id, offset=offset))


def replace_blocks(doc: Document, blocks: Iterable[Block], cursor: Optional[Cursor] = None) -> Document:
    """Swap the whole block sequence. An empty sequence becomes one empty paragraph.

    The given cursor (or the current one) is kept only if it still points into the new blocks.
    """
    blocks = list(blocks) or [new_block(BlockType.paragraph)]
    return revise(doc, blocks=blocks, cursor=_clamped(cursor if cursor is not None else doc.cursor, blocks))


# --- derived, read-only views ---

def document_text(doc: Document) -> str:
    """All block contents joined by a single space."""
    return " ".join(b.content for b in doc.blocks)


def generated_title(doc: Document) -> str:
    """First non-blank block content, truncated, else 'Untitled Document'."""
    for block in doc.blocks:
        text = block.content.strip()
        if text:
            return text.splitlines()[0][:TITLE_LENGTH]
    return "Untitled Document"


def word_count(doc: Document) -> int:
    return sum(b.word_count for b in doc.blocks)


def reading_time(doc: Document) -> str:
    """Estimated reading time at 200 words per minute, e.g. '< 1 min', '3 min', '1h 5m'."""
    minutes = word_count(doc) / WORDS_PER_MINUTE
    if minutes < 1:
        return "< 1 min"
    if minutes < 60:
        return f"{int(minutes)} min"
    return f"{int(minutes // 60)}h {int(minutes % 60)}m"


def is_empty(doc: Document) -> bool:
    return all(b.is_empty for b in doc.blocks)
