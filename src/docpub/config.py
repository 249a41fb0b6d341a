"""Application configuration: settings schema and config.yaml loader"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:        str = "docpub"
    adoc_dir:        str = Field(default="exports/documentation",      description="Exported AsciiDoc sources")
    html_dir:        str = Field(default="exports/documentation/html", description="Exported HTML sources")
    diagrams_dir:    str = Field(default="exports/diagrams",           description="Exported diagram images (PNG)")
    markdown_dir:    str = Field(default="converted/markdown",         description="Intermediate Markdown output")
    adf_dir:         str = Field(default="converted/adf",              description="Intermediate ADF JSON output")
    parser_config:   str = Field(default="gfm-like",    description="MarkdownIt parser preset name")
    asciidoctor_cmd: str = Field(default="asciidoctor", description="AsciiDoc processor executable")
    log_level:       str = Field(default="INFO",        description="Root logging level")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {value}")
        return level


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then DOCPUB_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in Settings.model_fields:
        if val := os.getenv(f"DOCPUB_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
