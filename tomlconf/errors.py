"""Exceptions raised while locating, loading or saving a config file."""


class ConfigError(Exception):
    """Base class for every tomlconf failure."""


class PathResolutionError(ConfigError):
    """The platform config directory could not be determined."""


class FileSystemError(ConfigError):
    """Creating a directory, reading or writing the file failed."""


class ParseError(ConfigError):
    """The file is not valid TOML."""


class SchemaError(ConfigError):
    """The file is valid TOML but does not match the config type."""


class SerializeError(ConfigError):
    """The in-memory config could not be rendered back to TOML."""
