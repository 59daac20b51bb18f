"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MDSITE_"


class Settings(BaseModel):
    site_title:     str = "mdsite"
    base_url:       str = Field(default="/", description="URL prefix for page links in the listing")
    content_dir:    str = Field(default="content", description="Directory scanned when no path is given")
    output_dir:     str = Field(default="public", description="Directory for rendered HTML + index.json")
    parser_config:  str = Field(default="gfm-like", description="MarkdownIt parser preset name")
    template_dir:   Optional[str] = Field(default=None, description="Override directory for page/list templates")
    include_drafts: bool = Field(default=False, description="Publish documents marked draft: true")
    required_keys:  list[str] = Field(default_factory=lambda: ["title", "date"])
    log_level:      str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$")


def _env_value(name: str, raw: str) -> Any:
    """Split comma-separated env values for list fields; pydantic coerces the rest."""
    if name == "required_keys":
        return [k.strip() for k in raw.split(",") if k.strip()]
    return raw


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDSITE_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = _env_value(name, val)

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
