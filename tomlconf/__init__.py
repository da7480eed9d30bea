"""Locate, create, load and save a TOML config file in the user's config directory."""

from .config import (
    ConfigData,
    ConfigFile,
    ConfigFind,
    ConfigSerialize,
    FindStatus,
    SetupOutcome,
    SetupStatus,
    get_backup,
)
from .errors import (
    ConfigError,
    FileSystemError,
    ParseError,
    PathResolutionError,
    SchemaError,
    SerializeError,
)
from .paths import config_dir, find_path

__all__ = [
    "ConfigData",
    "ConfigFile",
    "ConfigFind",
    "ConfigSerialize",
    "FindStatus",
    "SetupOutcome",
    "SetupStatus",
    "get_backup",
    # Errors
    "ConfigError",
    "FileSystemError",
    "ParseError",
    "PathResolutionError",
    "SchemaError",
    "SerializeError",
    # Paths
    "config_dir",
    "find_path",
]
