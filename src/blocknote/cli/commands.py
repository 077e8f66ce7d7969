"""CLI command implementations"""

import json
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Iterator, Optional
from uuid import UUID

import typer
from sqlalchemy.exc import SQLAlchemyError

from blocknote.config import Settings, load_config
from blocknote.core.blocks import new_block
from blocknote.core.document import (
    generated_title, insert_block, move_block, reading_time, remove_block, replace_block_content,
    word_count,
)
from blocknote.core.errors import BlocknoteError
from blocknote.core.export import export_documents, to_markdown, to_text
from blocknote.core.models import BlockType, Document
from blocknote.core.parse import parse_file
from blocknote.crud.codec import to_record
from blocknote.crud.database import init_db, make_engine, reset_db
from blocknote.crud.file_storage import JsonFileStorage
from blocknote.crud.store import DocumentStore
from blocknote.logging_config import configure_logging


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


@contextmanager
def _open_store(settings: Settings) -> Iterator[DocumentStore]:
    """Open the configured store; blocknote errors become a clean exit 1 and tagging is drained on exit."""
    configure_logging(settings.log_level)
    try:
        store = DocumentStore.from_settings(settings)
    except BlocknoteError as e:
        _fail("Could not open storage", e)
    try:
        yield store
    except BlocknoteError as e:
        _fail(str(e))
    finally:
        store.close()


def _require(store: DocumentStore, doc_id: str) -> Document:
    doc = store.get(doc_id)
    if doc is None:
        _fail(f"Document {doc_id} not found")
    return doc


def _block_id(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        _fail(f"Invalid block id: {value}")


def _echo_doc(doc: Document) -> None:
    tags = ", ".join(doc.tags)
    state = "" if doc.active else "  (archived)"
    typer.echo(f"{doc.id}  {doc.updated_at:%Y-%m-%d %H:%M}  {generated_title(doc)}  [{tags}]{state}")


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Discard all stored documents")] = False,
    ):
    """Initialize the configured storage. Use --reset to clear existing data."""
    settings = _settings()
    if settings.storage == "sqlite":
        engine = make_engine(settings.db_url)
        try:
            if reset:
                reset_db(engine)
            else:
                init_db(engine)
        except SQLAlchemyError as e:
            _fail("Init failed", e)
        typer.echo(f"Database initialized at: {settings.db_url}")
    elif settings.storage == "json":
        storage = JsonFileStorage(settings.data_path, backup=settings.backup)
        if reset or not storage.path.exists():
            try:
                storage.save([])
            except BlocknoteError as e:
                _fail("Init failed", e)
        typer.echo(f"Collection initialized at: {storage.path}")
    else:
        typer.echo("Memory storage needs no initialization.")


def new_cmd(
    text: Annotated[str, typer.Argument(help="Initial paragraph content")] = "",
    heading: Annotated[Optional[str], typer.Option("--heading", help="Prepend a heading block")] = None,
    ):
    """Create a document and print its id and derived tags."""
    settings = _settings()
    with _open_store(settings) as store:
        blocks = None
        if heading:
            blocks = [new_block(BlockType.heading, heading, level=1), new_block(BlockType.paragraph, text)]
        doc = store.create(text, blocks=blocks)
        store.wait_for_tagging()
        _echo_doc(store.get(doc.id))


def import_cmd(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True, help="Markdown file")],
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Import a markdown file as a new document; frontmatter tags and author are kept."""
    settings = _settings(overrides={"parser_config": parser})
    try:
        parsed = parse_file(path, settings.parser_config)
    except ValueError as e:
        _fail(f"Failed to parse {path}", e)
    tags = parsed.frontmatter.get("tags") or []
    if not isinstance(tags, (str, list)):
        _fail(f"Invalid frontmatter tags in {path}: expected a string or a list, got {tags!r}")
    author = parsed.frontmatter.get("author")
    with _open_store(settings) as store:
        doc = store.create(author=str(author) if author else None, blocks=parsed.blocks)
        if tags:
            store.add_tags(doc.id, tags)
        store.wait_for_tagging()
        _echo_doc(store.get(doc.id))


def list_cmd(
    all_docs: Annotated[bool, typer.Option("--all", help="Include archived documents")] = False,
    archived: Annotated[bool, typer.Option("--archived", help="Only archived documents")] = False,
    tag: Annotated[Optional[str], typer.Option("--tag", help="Only documents with this tag")] = None,
    query: Annotated[Optional[str], typer.Option("--query", "-q", help="Search title, content, and tags")] = None,
    ):
    """List documents, most recently updated first."""
    active = None if all_docs else not archived
    with _open_store(_settings()) as store:
        docs = store.list(active=active, tag=tag, query=query)
    if not docs:
        typer.echo("No documents found.")
        raise typer.Exit(1)
    for doc in docs:
        _echo_doc(doc)


def show_cmd(
    doc_id: Annotated[str, typer.Argument(help="Document id")],
    fmt: Annotated[str, typer.Option("--format", "-f", help="md, text, json, or blocks")] = "md",
    ):
    """Print a document."""
    with _open_store(_settings()) as store:
        doc = _require(store, doc_id)
    if fmt == "md":
        typer.echo(to_markdown(doc), nl=False)
    elif fmt == "text":
        typer.echo(to_text(doc))
    elif fmt == "json":
        typer.echo(json.dumps(to_record(doc), indent=2, ensure_ascii=False))
    elif fmt == "blocks":
        for block in doc.blocks:
            first_line = block.content.splitlines()[0] if block.content else ""
            typer.echo(f"{block.order:>3}  {block.id}  {block.type.value:<9}  {first_line}")
        typer.echo(f"{word_count(doc)} words, {reading_time(doc)}")
    else:
        _fail(f"Unknown format: {fmt}")


def add_block_cmd(
    doc_id: Annotated[str, typer.Argument(help="Document id")],
    text: Annotated[str, typer.Argument(help="Block content")],
    block_type: Annotated[BlockType, typer.Option("--type", "-t", help="Block type")] = BlockType.paragraph,
    after: Annotated[Optional[str], typer.Option("--after", help="Insert after this block id (default: append)")] = None,
    level: Annotated[Optional[int], typer.Option("--level", help="Heading level (1-6)")] = None,
    ):
    """Insert a new block into a document."""
    with _open_store(_settings()) as store:
        doc = _require(store, doc_id)
        metadata = {"level": level} if level is not None else {}
        block = new_block(block_type, text, **metadata)
        anchor = _block_id(after) if after else doc.blocks[-1].id
        doc = store.update(insert_block(doc, anchor, block))
    typer.echo(f"Added block {block.id}")


def set_block_cmd(
    doc_id: Annotated[str, typer.Argument(help="Document id")],
    block_id: Annotated[str, typer.Argument(help="Block id")],
    text: Annotated[str, typer.Argument(help="New block content")],
    ):
    """Replace the content of one block."""
    with _open_store(_settings()) as store:
        doc = _require(store, doc_id)
        store.update(replace_block_content(doc, _block_id(block_id), text))
    typer.echo("Block updated.")


def remove_block_cmd(
    doc_id: Annotated[str, typer.Argument(help="Document id")],
    block_id: Annotated[str, typer.Argument(help="Block id")],
    ):
    """Remove one block from a document."""
    with _open_store(_settings()) as store:
        doc = _require(store, doc_id)
        store.update(remove_block(doc, _block_id(block_id)))
    typer.echo("Block removed.")


def move_block_cmd(
    doc_id: Annotated[str, typer.Argument(help="Document id")],
    block_id: Annotated[str, typer.Argument(help="Block id")],
    index: Annotated[int, typer.Argument(help="New position (clamped to the document)")],
    ):
    """Move a block to a new position."""
    with _open_store(_settings()) as store:
        doc = _require(store, doc_id)
        store.update(move_block(doc, _block_id(block_id), index))
    typer.echo("Block moved.")


def tag_cmd(
    doc_id: Annotated[str, typer.Argument(help="Document id")],
    tags: Annotated[list[str], typer.Argument(help="Tags to add")],
    ):
    """Add tags to a document."""
    with _open_store(_settings()) as store:
        doc = store.add_tags(doc_id, tags)
    _echo_doc(doc)


def archive_cmd(doc_id: Annotated[str, typer.Argument(help="Document id")]):
    """Archive a document without deleting it."""
    with _open_store(_settings()) as store:
        _echo_doc(store.archive(doc_id))


def unarchive_cmd(doc_id: Annotated[str, typer.Argument(help="Document id")]):
    """Restore an archived document."""
    with _open_store(_settings()) as store:
        _echo_doc(store.unarchive(doc_id))


def delete_cmd(doc_id: Annotated[str, typer.Argument(help="Document id")]):
    """Permanently delete a document. Unknown ids are ignored."""
    with _open_store(_settings()) as store:
        store.delete(doc_id)
    typer.echo(f"Deleted {doc_id}")


def stats_cmd(
    all_docs: Annotated[bool, typer.Option("--all", help="Include archived documents")] = False,
    ):
    """Print collection statistics."""
    with _open_store(_settings()) as store:
        stats = store.stats(active=None if all_docs else True)
    typer.echo(f"Documents: {stats.total_documents}")
    typer.echo(f"Words:     {stats.total_words} (avg {stats.average_words})")
    typer.echo(f"Blocks:    {stats.total_blocks} (avg {stats.average_blocks})")
    typer.echo("By type:   " + ", ".join(f"{k}={v}" for k, v in stats.blocks_by_type.items()))
    typer.echo(f"Length:    short={stats.short}, medium={stats.medium}, long={stats.long}")
    for rank, (tag, count) in enumerate(stats.top_tags, start=1):
        typer.echo(f"  #{rank} {tag} ({count})")


def export_cmd(
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    all_docs: Annotated[bool, typer.Option("--all", help="Include archived documents")] = False,
    ):
    """Write documents as markdown with YAML frontmatter."""
    settings = _settings(overrides={"export_dir": out})
    output_dir = Path(settings.export_dir)
    with _open_store(settings) as store:
        docs = store.list(active=None if all_docs else True)
    if not docs:
        typer.echo("No documents to export.")
        raise typer.Exit(1)
    try:
        results = export_documents(docs, output_dir)
    except OSError as e:
        _fail("Export failed", e)
    for title, path in results:
        typer.echo(f"  {title} -> {path}")
    typer.echo(f"Exported {len(results)} document(s) to {output_dir}/")
