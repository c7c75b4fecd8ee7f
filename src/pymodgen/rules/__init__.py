"""Configuration for pymodgen."""

from pymodgen.rules.config import (
    CONFIG_FILENAME,
    ConfigError,
    PyModGenConfig,
    load_config,
    resolve_output_dir,
)

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "PyModGenConfig",
    "load_config",
    "resolve_output_dir",
]
