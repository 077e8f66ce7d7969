"""Export: render documents as markdown (with YAML frontmatter) or plain text and write files"""

from pathlib import Path

import yaml

from blocknote.core.document import generated_title
from blocknote.core.models import Block, BlockType, Document
from blocknote.core.utils.slug import slugify


def render_block(block: Block) -> str:
    """Render a single block as markdown source."""
    if block.type == BlockType.heading:
        return f"{'#' * block.metadata.get('level', 1)} {block.content}"
    if block.type == BlockType.list:
        items = [line for line in block.content.splitlines() if line.strip()]
        if block.metadata.get("ordered"):
            return "\n".join(f"{i}. {item}" for i, item in enumerate(items, start=1))
        return "\n".join(f"- {item}" for item in items)
    if block.type == BlockType.quote:
        return "\n".join(f"> {line}".rstrip() for line in block.content.splitlines())
    if block.type == BlockType.code:
        return f"```{block.metadata.get('language') or ''}\n{block.content}\n```"
    return block.content


def build_frontmatter(doc: Document) -> dict:
    return {
        "id": str(doc.id),
        "title": generated_title(doc),
        "author": doc.author,
        "tags": list(doc.tags),
        "created_at": doc.created_at.isoformat(),
        "updated_at": doc.updated_at.isoformat(),
    }


def to_markdown(doc: Document, frontmatter: bool = True) -> str:
    """Return the document as markdown, optionally with a YAML frontmatter block prepended.

    Empty blocks are skipped so an untouched document renders as an empty body.
    """
    body = "\n\n".join(render_block(b) for b in doc.blocks if not b.is_empty)
    if not frontmatter:
        return f"{body}\n" if body else ""
    header = yaml.dump(build_frontmatter(doc), default_flow_style=False, allow_unicode=True, sort_keys=False)
    return f"---\n{header}---\n\n{body}\n" if body else f"---\n{header}---\n"


def to_text(doc: Document) -> str:
    """Return block contents separated by blank lines."""
    return "\n\n".join(b.content for b in doc.blocks)


def export_name(doc: Document) -> str:
    """File stem for a document: title slug plus the first id segment for uniqueness."""
    slug = slugify(generated_title(doc)) or "untitled"
    return f"{slug}-{str(doc.id)[:8]}"


def write_document(doc: Document, output_dir: Path, frontmatter: bool = True) -> Path:
    """Write doc as <slug>.md under output_dir. Returns the written path."""
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{export_name(doc)}.md"
    path.write_text(to_markdown(doc, frontmatter), encoding="utf-8")
    return path


def export_documents(docs: list[Document], output_dir: Path) -> list[tuple[str, Path]]:
    """Write every doc to output_dir. Returns (title, path) pairs."""
    return [(generated_title(doc), write_document(doc, output_dir)) for doc in docs]
