"""Processing policies for remarker."""

from rules.config import (
    CONFIG_FILENAME,
    ConfigError,
    RemarkConfig,
    load_config,
)

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "RemarkConfig",
    "load_config",
]
