"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "BLOCKNOTE_"


class Settings(BaseModel):
    app_name:      str = "blocknote"
    storage:       str = Field(default="json", pattern="^(json|sqlite|memory)$", description="json, sqlite or memory")
    data_path:     str = Field(default=".blocknote/documents.json", description="Collection file for json storage")
    db_url:        str = Field(default="sqlite:///blocknote.db", description="Database URL for sqlite storage")
    backup:        bool = Field(default=True, description="Copy the previous collection file to <name>.backup before saving")
    author:        str = Field(default="User", description="Author recorded on new documents")
    async_tagging: bool = Field(default=True, description="Derive tags on a background worker")
    parser_config: str = Field(default="commonmark", description="MarkdownIt parser preset name for import")
    export_dir:    str = Field(default="export", description="Directory for exported markdown files")
    log_level:     str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then BLOCKNOTE_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
