import dataclasses
import datetime
import enum
import logging
import sys
import types
import typing
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

from .errors import (
    ConfigError,
    FileSystemError,
    ParseError,
    PathResolutionError,
    SchemaError,
    SerializeError,
)
from .paths import find_path

logger = logging.getLogger(__name__)

BACKUP_PREFIX = '.bkp.'

_UNION_TYPES = (typing.Union, getattr(types, 'UnionType', typing.Union))
_TOML_DATES = (datetime.datetime, datetime.date, datetime.time)


def get_backup(path):
    """Return the backup path for a config file: .bkp.<name> beside it."""
    path = Path(path)
    return path.with_name(BACKUP_PREFIX + path.name)


def _backup_or_mkdir(path, create_backup, create_parent):
    if create_backup and path.exists():
        backup = get_backup(path)
        try:
            path.replace(backup)
            logger.info("Backed up %s to %s", path, backup)
        except OSError as e:
            logger.warning("Could not back up %s: %s", path, e)
    elif create_parent and not path.parent.exists():
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileSystemError(f"Cannot create directory {path.parent}: {e}") from e


def _write_text(path, text):
    try:
        with open(path, 'w', encoding='utf-8') as f:
            f.write(text)
    except OSError as e:
        raise FileSystemError(f"Cannot write file {path}: {e}") from e
    logger.debug("Wrote %d characters to %s", len(text), path)


# -- Schema checking ----------------------------------------------------------
def _describe(tp):
    return getattr(tp, '__name__', None) or str(tp).replace('typing.', '')


def _convert(value, tp, where):
    """Check a parsed TOML value against a type annotation."""
    if tp is typing.Any:
        return value
    origin = typing.get_origin(tp)
    if origin in _UNION_TYPES:
        args = typing.get_args(tp)
        if value is None and type(None) in args:
            return None
        for arg in args:
            if arg is type(None):
                continue
            try:
                return _convert(value, arg, where)
            except SchemaError:
                continue
        raise SchemaError(f"{where}: expected {_describe(tp)}, got {type(value).__name__}")
    if origin in (list, typing.List, tuple):
        if not isinstance(value, list):
            raise SchemaError(f"{where}: expected an array, got {type(value).__name__}")
        args = typing.get_args(tp)
        if origin is tuple and args and Ellipsis not in args:
            # fixed-length tuple, one type per position
            if len(value) != len(args):
                raise SchemaError(f"{where}: expected {len(args)} items, got {len(value)}")
            item_tps = args
        else:
            item_tps = [args[0] if args else typing.Any] * len(value)
        items = [_convert(v, t, f"{where}[{i}]") for i, (v, t) in enumerate(zip(value, item_tps))]
        return tuple(items) if origin is tuple else items
    if origin in (dict, typing.Dict):
        if not isinstance(value, dict):
            raise SchemaError(f"{where}: expected a table, got {type(value).__name__}")
        args = typing.get_args(tp)
        val_tp = args[1] if len(args) == 2 else typing.Any
        return {k: _convert(v, val_tp, f"{where}.{k}") for k, v in value.items()}
    if dataclasses.is_dataclass(tp):
        return _build_dataclass(tp, value, where)
    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        try:
            return tp(value)
        except ValueError as e:
            raise SchemaError(f"{where}: {e}") from e
    if tp is bool:
        if not isinstance(value, bool):
            raise SchemaError(f"{where}: expected a boolean, got {type(value).__name__}")
        return value
    if tp is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise SchemaError(f"{where}: expected an integer, got {type(value).__name__}")
        return value
    if tp is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SchemaError(f"{where}: expected a float, got {type(value).__name__}")
        return float(value)
    if tp is str:
        if not isinstance(value, str):
            raise SchemaError(f"{where}: expected a string, got {type(value).__name__}")
        return value
    if tp in _TOML_DATES:
        # datetime is a subclass of date; keep the TOML kinds apart
        if type(value) is not tp:
            raise SchemaError(f"{where}: expected {_describe(tp)}, got {type(value).__name__}")
        return value
    if isinstance(tp, type):
        if not isinstance(value, tp):
            raise SchemaError(f"{where}: expected {_describe(tp)}, got {type(value).__name__}")
        return value
    return value


def _build_dataclass(cls, data, where=''):
    if not isinstance(data, dict):
        raise SchemaError(f"{where or 'document'}: expected a table, got {type(data).__name__}")
    hints = typing.get_type_hints(cls)
    kwargs = {}
    for field in dataclasses.fields(cls):
        if not field.init:
            continue
        name = f"{where}.{field.name}" if where else field.name
        tp = hints.get(field.name, typing.Any)
        if field.name not in data:
            has_default = (
                field.default is not dataclasses.MISSING
                or field.default_factory is not dataclasses.MISSING
            )
            if has_default:
                continue
            if typing.get_origin(tp) in _UNION_TYPES and type(None) in typing.get_args(tp):
                kwargs[field.name] = None
                continue
            raise SchemaError(f"missing field `{name}`")
        kwargs[field.name] = _convert(data[field.name], tp, name)
    return cls(**kwargs)


def _none_reloads_as_none(field, tp):
    """Whether dropping a None field from the file gives None back on load."""
    if field.default is None:
        return True
    no_default = (
        field.default is dataclasses.MISSING
        and field.default_factory is dataclasses.MISSING
    )
    return no_default and typing.get_origin(tp) in _UNION_TYPES and type(None) in typing.get_args(tp)


def _to_toml(value, where):
    """Turn a config value into plain TOML data. TOML has no null."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        hints = typing.get_type_hints(type(value))
        out = {}
        for field in dataclasses.fields(value):
            name = f"{where}.{field.name}" if where else field.name
            v = getattr(value, field.name)
            if v is None:
                if not _none_reloads_as_none(field, hints.get(field.name, typing.Any)):
                    raise SerializeError(f"{name}: None cannot be written and would not load back")
                continue
            out[field.name] = _to_toml(v, name)
        return out
    if isinstance(value, dict):
        return {k: _to_toml(v, f"{where}.{k}") for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_toml(v, f"{where}[{i}]") for i, v in enumerate(value)]
    if isinstance(value, enum.Enum):
        return value.value
    if value is None:
        raise SerializeError(f"{where}: None cannot be written to TOML")
    return value


# -- Config types -------------------------------------------------------------
class ConfigData:
    """Base class for a config type that can be loaded from a TOML file.

    Subclasses set DEFAULT to the text of their factory default document.
    Dataclass subclasses get from_dict for free; anything else overrides it.

        @dataclass
        class AppConfig(ConfigData):
            DEFAULT = 'output = "hi"\\nnumber = 3\\n'
            output: str
            number: int
    """

    DEFAULT: typing.ClassVar[str] = ''

    @classmethod
    def from_dict(cls, data):
        if not dataclasses.is_dataclass(cls):
            raise TypeError(f"{cls.__name__} is not a dataclass; override from_dict()")
        return _build_dataclass(cls, data)

    def prepare(self):
        """Final transformations on a freshly parsed config.

        No-op by default; override to e.g. normalise casing of string fields.
        """
        return self

    @classmethod
    def parse(cls, text, source='<string>'):
        """Parse TOML text into an instance of this config type."""
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise ParseError(f"Cannot read configuration from {source}: {e}") from e
        try:
            config = cls.from_dict(data)
        except SchemaError as e:
            raise SchemaError(f"Cannot read configuration from {source}: {e}") from e
        return config.prepare()

    @classmethod
    def open(cls, path):
        """Read and parse the file at path."""
        path = Path(path)
        try:
            with open(path, 'rb') as f:
                raw = f.read()
        except OSError as e:
            raise FileSystemError(f"Cannot access file {path}: {e}") from e
        try:
            text = raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ParseError(f"Cannot read configuration from {path}: {e}") from e
        logger.debug("Read %d bytes from %s", len(raw), path)
        return cls.parse(text, source=path)

    @classmethod
    def create(cls, path, create_backup=False, create_parent=True):
        """Write the default document to path.

        create_backup: move an existing file to .bkp.<name> first.
        create_parent: create the parent directory if it does not exist.
        """
        path = Path(path)
        _backup_or_mkdir(path, create_backup, create_parent)
        _write_text(path, cls.DEFAULT)
        logger.info("Created default configuration at %s", path)

    @classmethod
    def setup(cls, qualifier, organization, application, filename):
        """Find the config file, creating it from DEFAULT on first run."""
        path = find_path(qualifier, organization, application, filename)
        if path.is_file():
            config = cls.open(path)
            return SetupOutcome(SetupStatus.LOADED, f"Successfully read file at {path}", config.with_path(path))
        cls.create(path, create_backup=False, create_parent=True)
        config = cls.parse(cls.DEFAULT, source=f"default document of {cls.__name__}")
        return SetupOutcome(
            SetupStatus.CREATED, f"Created new file with default values at {path}", config.with_path(path)
        )

    @classmethod
    def find(cls, qualifier, organization, application, filename):
        """Look for an existing config file without creating anything."""
        try:
            path = find_path(qualifier, organization, application, filename)
        except PathResolutionError as e:
            return ConfigFind(FindStatus.NO_PATH, error=e)
        return cls.from_path(path)

    @classmethod
    def from_path(cls, path):
        path = Path(path)
        if not path.exists():
            return ConfigFind(FindStatus.MISSING, path)
        try:
            config = cls.open(path)
        except ConfigError as e:
            return ConfigFind(FindStatus.EXISTS, path, error=e)
        return ConfigFind(FindStatus.EXISTS, path, config=config.with_path(path))

    @classmethod
    def from_path_or_auto(cls, path, qualifier, organization, application, filename):
        if path is None:
            return cls.find(qualifier, organization, application, filename)
        return cls.from_path(path)

    def with_path(self, path):
        """Associate a file path with this configuration."""
        return ConfigFile(self, path)


class ConfigSerialize:
    """Mixin for config types that can be written back to their file."""

    def to_dict(self):
        if not dataclasses.is_dataclass(self):
            raise TypeError(f"{type(self).__name__} is not a dataclass; override to_dict()")
        return _to_toml(self, "")

    def dumps(self):
        try:
            return tomli_w.dumps(self.to_dict())
        except (TypeError, ValueError) as e:
            raise SerializeError(f"Cannot serialize {type(self).__name__}: {e}") from e


class ConfigFile:
    """A loaded config together with the path of the file it belongs to."""

    def __init__(self, data, path):
        self.data = data
        self._path = Path(path)

    @property
    def path(self):
        return self._path

    def __getattr__(self, name):
        # only reached for names not found on the handle itself
        if name.startswith('__') or name in ('data', '_path'):
            raise AttributeError(name)
        return getattr(self.data, name)

    def __repr__(self):
        return f"ConfigFile({self.data!r}, {str(self._path)!r})"

    def reload(self):
        """Re-read the file. On failure the current data is kept."""
        self.data = type(self.data).open(self._path)

    def save(self, create_backup=False, create_parent=True):
        """Overwrite the file with the current data."""
        if not isinstance(self.data, ConfigSerialize):
            raise SerializeError(f"{type(self.data).__name__} does not support saving")
        text = self.data.dumps()
        _backup_or_mkdir(self._path, create_backup, create_parent)
        _write_text(self._path, text)
        logger.info("Saved configuration to %s", self._path)


# -- Results ------------------------------------------------------------------
class SetupStatus(enum.Enum):
    CREATED = 'created'
    LOADED = 'loaded'


@dataclasses.dataclass
class SetupOutcome:
    status: SetupStatus
    message: str
    config: ConfigFile

    @property
    def created(self):
        return self.status is SetupStatus.CREATED

    def __str__(self):
        return self.message


class FindStatus(enum.Enum):
    NO_PATH = 'no_path'
    MISSING = 'missing'
    EXISTS = 'exists'


@dataclasses.dataclass
class ConfigFind:
    """Outcome of looking for a config file without creating it."""

    status: FindStatus
    path: typing.Optional[Path] = None
    config: typing.Optional[ConfigFile] = None
    error: typing.Optional[ConfigError] = None

    @property
    def ok(self):
        return self.config is not None

    def __str__(self):
        if self.status is FindStatus.NO_PATH:
            return "Cannot find config path."
        if self.status is FindStatus.MISSING:
            return f"File does not exist: {self.path}"
        if self.error is not None:
            return str(self.error)
        return f"Successfully read file at {self.path}"
