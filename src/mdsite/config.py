"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:        str = "mdsite"
    content_dir:     str = Field(default="content",  description="Root directory of source documents")
    output_dir:      str = Field(default="public",   description="Directory for rendered pages")
    layouts_dir:     str = Field(default="layouts",  description="Directory searched for <layout>.html templates")
    default_layout:  str = Field(default="default",  description="Layout used when a document names none")
    list_layout:     str = Field(default="list",     description="Layout for the home listing and archives")
    taxonomy_layout: str = Field(default="taxonomy", description="Layout for per-tag index pages")
    site_title:      str = "My Site"
    base_url:        str = "/"
    parser_config:   str = Field(default="gfm-like", description="MarkdownIt preset name")
    build_drafts:    bool = Field(default=False, description="Render draft pages (never listed)")
    workers:         int = Field(default=1, ge=1, description="Documents rendered in parallel")
    clean:           bool = Field(default=False, description="Remove output_dir before writing")
    log_level:       str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDSITE_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping")

    for name in Settings.model_fields:
        if val := os.getenv(f"MDSITE_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid settings: {e}") from e
