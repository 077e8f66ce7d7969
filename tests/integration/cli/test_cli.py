"""Integration tests for the blocknote CLI commands"""

import json

from blocknote.cli.cli import app


def _blocks(runner, doc_id):
    """Return (id, type, first line) for each block listed by `show -f blocks`."""
    result = runner.invoke(app, ["show", doc_id, "-f", "blocks"])
    assert result.exit_code == 0, result.output
    rows = []
    for line in result.stdout.splitlines()[:-1]:
        parts = line.split(maxsplit=3)
        rows.append((parts[1], parts[2], parts[3] if len(parts) > 3 else ""))
    return rows


# --- init / new / list ---

def test_init_creates_collection(runner, tmp_path):
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0, result.output
    assert json.loads((tmp_path / "data" / "documents.json").read_text()) == []


def test_new_prints_id_and_tags(runner):
    result = runner.invoke(app, ["new", "Team meeting about project budget"])
    assert result.exit_code == 0, result.output
    assert "Team meeting about project budget" in result.stdout
    assert "meeting" in result.stdout
    assert "project" in result.stdout


def test_new_with_heading(runner):
    result = runner.invoke(app, ["new", "body text", "--heading", "Title"])
    assert result.exit_code == 0, result.output
    doc_id = result.stdout.split()[0]
    assert [(t, text) for _, t, text in _blocks(runner, doc_id)] == [
        ("heading", "Title"), ("paragraph", "body text"),
    ]


def test_list_filters(runner, create_doc):
    meeting = create_doc("Weekly meeting")
    trip = create_doc("Trip to Rome")
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert meeting in result.stdout and trip in result.stdout

    result = runner.invoke(app, ["list", "--tag", "travel"])
    assert trip in result.stdout and meeting not in result.stdout

    result = runner.invoke(app, ["list", "-q", "weekly"])
    assert meeting in result.stdout and trip not in result.stdout


def test_list_empty_exits_1(runner):
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 1
    assert "No documents found." in result.stdout


# --- show ---

def test_show_formats(runner, create_doc):
    doc_id = create_doc("Hello there")
    md = runner.invoke(app, ["show", doc_id])
    assert md.exit_code == 0
    assert md.stdout.startswith("---\n")
    assert "Hello there" in md.stdout

    text = runner.invoke(app, ["show", doc_id, "--format", "text"])
    assert text.stdout.strip() == "Hello there"

    record = json.loads(runner.invoke(app, ["show", doc_id, "-f", "json"]).stdout)
    assert record["id"] == doc_id
    assert record["tags"] == ["general"]


def test_show_unknown_document_fails(runner):
    result = runner.invoke(app, ["show", "00000000-0000-0000-0000-000000000000"])
    assert result.exit_code == 1


def test_show_unknown_format_fails(runner, create_doc):
    doc_id = create_doc("x")
    assert runner.invoke(app, ["show", doc_id, "-f", "pdf"]).exit_code == 1


# --- block editing ---

def test_block_editing_commands(runner, create_doc):
    doc_id = create_doc("first")
    result = runner.invoke(app, ["add-block", doc_id, "Plan", "--type", "heading", "--level", "2"])
    assert result.exit_code == 0, result.output
    heading_id = result.stdout.split()[-1]
    assert [t for _, t, _ in _blocks(runner, doc_id)] == ["paragraph", "heading"]

    result = runner.invoke(app, ["move-block", doc_id, heading_id, "0"])
    assert result.exit_code == 0, result.output
    assert [t for _, t, _ in _blocks(runner, doc_id)] == ["heading", "paragraph"]

    result = runner.invoke(app, ["set-block", doc_id, heading_id, "Renamed plan"])
    assert result.exit_code == 0, result.output
    assert _blocks(runner, doc_id)[0] == (heading_id, "heading", "Renamed plan")

    result = runner.invoke(app, ["remove-block", doc_id, heading_id])
    assert result.exit_code == 0, result.output
    assert [text for _, _, text in _blocks(runner, doc_id)] == ["first"]


def test_add_block_after_anchor(runner, create_doc):
    doc_id = create_doc("one")
    first_id = _blocks(runner, doc_id)[0][0]
    runner.invoke(app, ["add-block", doc_id, "three"])
    result = runner.invoke(app, ["add-block", doc_id, "two", "--after", first_id])
    assert result.exit_code == 0, result.output
    assert [text for _, _, text in _blocks(runner, doc_id)] == ["one", "two", "three"]


def test_add_block_invalid_heading_level_fails(runner, create_doc):
    doc_id = create_doc("x")
    result = runner.invoke(app, ["add-block", doc_id, "Plan", "-t", "heading", "--level", "9"])
    assert result.exit_code == 1


def test_set_block_malformed_block_id_fails(runner, create_doc):
    doc_id = create_doc("x")
    assert runner.invoke(app, ["set-block", doc_id, "not-a-block", "text"]).exit_code == 1


# --- tags / archive / delete ---

def test_tag_command(runner, create_doc):
    doc_id = create_doc("Hello there")
    result = runner.invoke(app, ["tag", doc_id, "Work", "Big Idea"])
    assert result.exit_code == 0, result.output
    assert "[big idea, general, work]" in result.stdout


def test_tag_unknown_document_fails(runner):
    result = runner.invoke(app, ["tag", "00000000-0000-0000-0000-000000000000", "work"])
    assert result.exit_code == 1


def test_archive_unarchive(runner, create_doc):
    doc_id = create_doc("Hello there")
    result = runner.invoke(app, ["archive", doc_id])
    assert result.exit_code == 0, result.output
    assert "(archived)" in result.stdout
    assert runner.invoke(app, ["list"]).exit_code == 1
    assert doc_id in runner.invoke(app, ["list", "--archived"]).stdout
    assert doc_id in runner.invoke(app, ["list", "--all"]).stdout

    assert runner.invoke(app, ["unarchive", doc_id]).exit_code == 0
    assert doc_id in runner.invoke(app, ["list"]).stdout


def test_delete_is_idempotent(runner, create_doc):
    doc_id = create_doc("bye")
    assert runner.invoke(app, ["delete", doc_id]).exit_code == 0
    assert runner.invoke(app, ["delete", doc_id]).exit_code == 0
    assert runner.invoke(app, ["list", "--all"]).exit_code == 1


# --- stats / export / import ---

def test_stats(runner, create_doc):
    create_doc("Team meeting")
    create_doc("Grocery run")
    result = runner.invoke(app, ["stats"])
    assert result.exit_code == 0, result.output
    assert "Documents: 2" in result.stdout
    assert "meeting (1)" in result.stdout


def test_export(runner, create_doc, tmp_path):
    create_doc("Trip to Rome")
    result = runner.invoke(app, ["export", "--out-dir", str(tmp_path / "out")])
    assert result.exit_code == 0, result.output
    files = list((tmp_path / "out").glob("trip-to-rome-*.md"))
    assert len(files) == 1
    assert "Trip to Rome" in files[0].read_text(encoding="utf-8")


def test_export_nothing_exits_1(runner):
    assert runner.invoke(app, ["export"]).exit_code == 1


def test_import_markdown(runner, tmp_path):
    source = tmp_path / "note.md"
    source.write_text(
        "---\nauthor: Ada\ntags: [Work]\n---\n\n# Plan\n\n- milk\n- eggs\n\nBudget review.\n",
        encoding="utf-8",
    )
    result = runner.invoke(app, ["import", str(source)])
    assert result.exit_code == 0, result.output
    doc_id = result.stdout.split()[0]
    assert [t for _, t, _ in _blocks(runner, doc_id)] == ["heading", "list", "paragraph"]

    record = json.loads(runner.invoke(app, ["show", doc_id, "-f", "json"]).stdout)
    assert record["author"] == "Ada"
    assert {"work", "finance"} <= set(record["tags"])
    assert "general" not in record["tags"]


def test_import_invalid_frontmatter_fails(runner, tmp_path):
    source = tmp_path / "bad.md"
    source.write_text("---\nkey: [unclosed\n---\nbody\n", encoding="utf-8")
    assert runner.invoke(app, ["import", str(source)]).exit_code == 1


def test_import_scalar_frontmatter_tags_fails(runner, tmp_path):
    source = tmp_path / "scalar.md"
    source.write_text("---\ntags: 5\n---\n\nBody.\n", encoding="utf-8")
    result = runner.invoke(app, ["import", str(source)])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert runner.invoke(app, ["list", "--all"]).exit_code == 1


def test_import_single_string_tag(runner, tmp_path):
    source = tmp_path / "single.md"
    source.write_text("---\ntags: Work\n---\n\nHello there.\n", encoding="utf-8")
    result = runner.invoke(app, ["import", str(source)])
    assert result.exit_code == 0, result.output
    assert "[general, work]" in result.stdout


def test_new_with_heading_tags_heading_text(runner):
    result = runner.invoke(app, ["new", "see you there", "--heading", "Trip plan"])
    assert result.exit_code == 0, result.output
    assert "[travel]" in result.stdout


# --- sqlite backend ---

def test_sqlite_backend(runner, create_doc, tmp_path, monkeypatch):
    monkeypatch.setenv("BLOCKNOTE_STORAGE", "sqlite")
    monkeypatch.setenv("BLOCKNOTE_DB_URL", f"sqlite:///{tmp_path}/test.db")
    assert runner.invoke(app, ["init"]).exit_code == 0
    doc_id = create_doc("Project kickoff")
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert doc_id in result.stdout
    assert (tmp_path / "test.db").exists()
    assert not (tmp_path / "data" / "documents.json").exists()


def test_sqlite_init_unreachable_database_fails(runner, tmp_path, monkeypatch):
    monkeypatch.setenv("BLOCKNOTE_STORAGE", "sqlite")
    monkeypatch.setenv("BLOCKNOTE_DB_URL", f"sqlite:///{tmp_path}/missing_dir/x.db")
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
