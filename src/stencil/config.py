"""Configuration for stencil engines.

stencil.yaml schema:
- open_tag / close_tag: logic fragment delimiters
- statement: optional "module:function" rewriter for logic segments
- sandbox: regex alternation of forbidden identifiers
- debug: compile templates in debug mode from the start
- template_dirs / extensions: where the loader looks on a cache miss
- error_marker: string returned to callers when a template fails
"""

from __future__ import annotations

import importlib
import re
from pathlib import Path
from typing import Any, Callable

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from stencil.errors import ConfigError

CONFIG_FILENAME = "stencil.yaml"

DEFAULT_SANDBOX = r"__\w*|globals|locals"


class EngineConfig(BaseModel):
    """Compile-time settings, passed explicitly into every compilation."""

    open_tag: str = Field(default="<%", description="Opening logic delimiter")
    close_tag: str = Field(default="%>", description="Closing logic delimiter")
    statement: Callable[[str], str] | None = Field(
        default=None,
        description="Custom logic-segment rewriter; replaces debug line marking",
    )
    sandbox: str = Field(
        default=DEFAULT_SANDBOX,
        description="Regex alternation of identifiers forbidden in logic fragments",
    )
    debug: bool = Field(default=False, description="Compile in debug mode by default")
    template_dirs: list[Path] = Field(
        default_factory=list, description="Search directories for template lookup"
    )
    extensions: list[str] = Field(
        default_factory=lambda: ["", ".html", ".tpl"],
        description="Suffixes tried when looking a template id up on disk",
    )
    error_marker: str = Field(
        default="{Template Error}",
        description="Returned to the caller in place of a failed render",
    )

    @field_validator("open_tag", "close_tag")
    @classmethod
    def tag_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("delimiters must not be empty")
        return value

    @field_validator("sandbox")
    @classmethod
    def sandbox_compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid sandbox pattern: {e}") from e
        return value

    @field_validator("statement", mode="before")
    @classmethod
    def import_statement(cls, value: Any) -> Any:
        """Resolve "package.module:function" strings into the callable."""
        if not isinstance(value, str):
            return value
        module_name, _, attr = value.partition(":")
        if not attr:
            module_name, _, attr = value.rpartition(".")
        if not module_name or not attr:
            raise ValueError(f"invalid import string: {value!r}")
        try:
            module = importlib.import_module(module_name)
            return getattr(module, attr)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"cannot import {value!r}: {e}") from e

    @model_validator(mode="after")
    def tags_differ(self) -> "EngineConfig":
        if self.open_tag == self.close_tag:
            raise ValueError("open_tag and close_tag must differ")
        return self

    def with_options(self, **options: Any) -> "EngineConfig":
        """Return a validated copy with ``options`` applied."""
        data = dict(self)
        data.update(options)
        return EngineConfig(**data)


def find_config_file(start: Path | None = None) -> Path | None:
    """Find stencil.yaml in the start directory or its parents."""
    cwd = start or Path.cwd()
    for parent in [cwd] + list(cwd.parents):
        candidate = parent / CONFIG_FILENAME
        if candidate.exists():
            return candidate
    return None


def load_config(path: Path) -> EngineConfig:
    """Load stencil.yaml from path.

    Relative template_dirs are resolved against the file's directory.
    """
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping")

    dirs = data.get("template_dirs") or []
    data["template_dirs"] = [
        d if Path(d).is_absolute() else path.parent / d for d in dirs
    ]

    try:
        return EngineConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e
