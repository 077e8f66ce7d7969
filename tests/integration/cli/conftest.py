"""Shared fixtures for CLI integration tests"""

import pytest
from typer.testing import CliRunner

from blocknote.cli.cli import app


@pytest.fixture(name="runner")
def runner_fixture(tmp_path, monkeypatch):
    """CliRunner working in tmp_path with a json collection under tmp_path/data."""
    monkeypatch.chdir(tmp_path)
    for name in ("STORAGE", "DB_URL", "AUTHOR", "ASYNC_TAGGING", "EXPORT_DIR", "LOG_LEVEL"):
        monkeypatch.delenv(f"BLOCKNOTE_{name}", raising=False)
    monkeypatch.setenv("BLOCKNOTE_DATA_PATH", str(tmp_path / "data" / "documents.json"))
    return CliRunner()


@pytest.fixture(name="create_doc")
def create_doc_fixture(runner):
    """Return a function that runs `new TEXT` and returns the printed document id."""
    def create(text):
        result = runner.invoke(app, ["new", text])
        assert result.exit_code == 0, result.output
        return result.stdout.split()[0]
    return create
