"""Block construction and editing with per-variant payload validation"""

from typing import Any, Optional
from uuid import UUID

from blocknote.core.models import Block, BlockType, build


def new_block(
    block_type: BlockType | str = BlockType.paragraph,
    content: str = "",
    block_id: Optional[UUID] = None,
    **metadata: Any,
    ) -> Block:
    """Return a validated Block. Raises ValidationError if the payload does not fit the variant."""
    data: dict[str, Any] = {"type": block_type, "content": content, "metadata": metadata}
    if block_id is not None:
        data["id"] = block_id
    return build(Block, data)


def edit_block(
    block: Block,
    content: Optional[str] = None,
    block_type: BlockType | str | None = None,
    metadata: Optional[dict[str, Any]] = None,
    ) -> Block:
    """Return a new Block with the same id and order and updated content/type/metadata.

    Changing the type without explicit metadata drops the old variant's metadata.
    """
    data = block.model_dump()
    if content is not None:
        data["content"] = content
    if block_type is not None and block_type != block.type:
        data["type"] = block_type
        data["metadata"] = {}
    if metadata is not None:
        data["metadata"] = metadata
    return build(Block, data)
