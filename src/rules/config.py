from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILENAME = "remarker.toml"

MalformedParamsPolicy = Literal["fail", "skip"]
UnresolvedPolicy = Literal["retain", "drop"]


class RemarkConfig(BaseModel):
    """Configuration for annotation extraction and dispatch."""

    model_config = ConfigDict(extra="forbid")

    malformed_params: MalformedParamsPolicy = Field(
        default="fail",
        description=(
            "What to do when an annotation's parameters are not a JSON object: "
            "fail the whole call, or skip that annotation"
        ),
    )
    unresolved: UnresolvedPolicy = Field(
        default="retain",
        description=(
            "Keep annotations with no resolvable declaration (declaration=None) "
            "or drop them before dispatch"
        ),
    )
    isolate_handlers: bool = Field(
        default=False,
        description="Log handler errors and keep dispatching instead of stopping",
    )
    extensions: list[str] = Field(
        default_factory=lambda: [".js", ".mjs", ".cjs"],
        description="File suffixes scanned when the CLI walks a directory",
    )
    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to include (empty = all JavaScript files)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to exclude",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )

    @field_validator("extensions", mode="before")
    @classmethod
    def validate_extensions(cls, v: Any) -> Any:
        """Require dotted suffixes such as ``.js``."""
        if not isinstance(v, list):
            msg = "extensions must be a list of file suffixes"
            raise TypeError(msg)

        for suffix in v:
            if not isinstance(suffix, str) or not suffix.startswith("."):
                msg = f"Invalid extension {suffix!r}: expected a suffix like '.js'"
                raise ValueError(msg)

        return v


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def load_config(root: Path) -> RemarkConfig:
    """Load configuration from remarker.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return RemarkConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return RemarkConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
