from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILENAME = "pymodgen.toml"


class PyModGenConfig(BaseModel):
    """Configuration for expanding a source tree."""

    model_config = ConfigDict(extra="forbid")

    output_dir: str = Field(
        default=".pymodgen",
        description="Output directory for expanded modules and manifests",
    )
    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to include (empty = all Python files)",
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
    module_names: dict[str, str] = Field(
        default_factory=dict,
        description="External module name overrides: relative path -> name",
    )

    @field_validator("module_names", mode="before")
    @classmethod
    def validate_module_names(cls, v: Any) -> Any:
        """Reject empty names so a typo cannot produce an unnamed module."""
        if v is None:
            return {}

        if not isinstance(v, dict):
            msg = "module_names must be a mapping of relative path -> name"
            raise TypeError(msg)

        for path, name in v.items():
            if not isinstance(path, str) or not isinstance(name, str):
                msg = "module_names must be a mapping of str -> str"
                raise TypeError(msg)
            if not name:
                msg = f"Empty module name configured for '{path}'"
                raise ValueError(msg)

        return v


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def resolve_output_dir(root: Path, output_dir: str) -> Path:
    """Resolve a config-provided output_dir safely within the tree root.

    The config output_dir must be a non-empty relative path that remains
    within the root after resolution. Absolute paths and paths that escape
    the root are rejected.
    """
    if not output_dir:
        msg = "output_dir must be a non-empty relative path"
        raise ConfigError(msg)

    if output_dir.startswith("~"):
        msg = "output_dir must be a relative path within the repo root"
        raise ConfigError(msg)

    output_path = Path(output_dir)
    if output_path.is_absolute():
        msg = "output_dir must be a relative path within the repo root"
        raise ConfigError(msg)

    try:
        resolved_root = root.resolve()
        resolved_output = (resolved_root / output_path).resolve()
    except OSError as exc:
        msg = f"Failed to resolve output_dir '{output_dir}': {exc}"
        raise ConfigError(msg) from exc

    try:
        resolved_output.relative_to(resolved_root)
    except ValueError as exc:
        msg = f"output_dir '{output_dir}' escapes the repository root"
        raise ConfigError(msg) from exc

    return resolved_output


def load_config(root: Path) -> PyModGenConfig:
    """Load configuration from pymodgen.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return PyModGenConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return PyModGenConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
