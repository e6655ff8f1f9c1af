"""Configuration model for tinytemple.

The configuration file is the template context: every key in it can be
referenced from a template as ``{{ dotted.path }}``. It is loaded once per
build into a frozen tree of plain Python values.

Value kinds:
- String: ``str``
- Number: ``int`` or ``float``
- Boolean: ``bool``
- List: ``tuple`` of values
- Table: read-only mapping of ``str`` to values

Key functions:
- load: Parse a TOML (or YAML) file into a frozen Table.
- kind_of: Classify a value into its ValueKind.
- to_builtin: Thaw a frozen tree back into dicts and lists.
"""

from __future__ import annotations

import enum
import logging
import tomllib
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, Union

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")

ConfigValue = Union[str, int, float, bool, tuple, Mapping]
Table = Mapping[str, ConfigValue]


class ValueKind(enum.Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    LIST = "list"
    TABLE = "table"


def kind_of(value: Any) -> ValueKind:
    """Classify a configuration value.

    Args:
        value: A value taken from a loaded configuration tree.

    Returns:
        The ValueKind of the value.

    Raises:
        TypeError: If the value is not part of a configuration tree.
    """
    # bool first: it is a subclass of int
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, tuple):
        return ValueKind.LIST
    if isinstance(value, Mapping):
        return ValueKind.TABLE
    raise TypeError(f"not a configuration value: {type(value).__name__}")


class _UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that refuses duplicate mapping keys."""

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _ in node.value:
            if not isinstance(key_node, yaml.ScalarNode):
                continue
            key = self.construct_object(key_node, deep=deep)
            if key in seen:
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    f"found duplicate key {key!r}",
                    key_node.start_mark,
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def load(path: Path | str) -> Table:
    """Load a configuration file into a frozen Table.

    The format is picked from the file suffix: ``.yaml``/``.yml`` is read as
    YAML, anything else as TOML.

    Args:
        path: Path to the configuration file.

    Returns:
        Read-only mapping holding the whole configuration tree.

    Raises:
        ConfigError: If the file is missing, unreadable, malformed, repeats a
            key, or holds a value that is not a string, number, boolean,
            list or table.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError("config file not found", path) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"unable to read config file: {exc}", path) from exc

    if path.suffix.lower() in YAML_SUFFIXES:
        raw = _parse_yaml(text, path)
    else:
        raw = _parse_toml(text, path)

    if not isinstance(raw, dict):
        raise ConfigError("top level of the config file must be a table", path)
    table = _freeze(raw, "", path)
    logger.debug("config loaded from %s (%d top-level keys)", path, len(table))
    return table


def _parse_toml(text: str, path: Path) -> Any:
    # tomllib already rejects keys defined twice
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML: {exc}", path) from exc


def _parse_yaml(text: str, path: Path) -> Any:
    try:
        data = yaml.load(text, Loader=_UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML: {exc}", path) from exc
    return {} if data is None else data


def _freeze(value: Any, key_path: str, path: Path) -> ConfigValue:
    """Convert parsed data into immutable configuration values."""
    if isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, list):
        return tuple(
            _freeze(item, f"{key_path}[{index}]", path)
            for index, item in enumerate(value)
        )
    if isinstance(value, dict):
        frozen: dict[str, ConfigValue] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise ConfigError(
                    f"key {key!r} under '{key_path or '<root>'}' is not a string",
                    path,
                )
            child = f"{key_path}.{key}" if key_path else key
            frozen[key] = _freeze(item, child, path)
        return MappingProxyType(frozen)
    raise ConfigError(
        f"unsupported value of type {type(value).__name__} at '{key_path}'", path
    )


def to_builtin(value: ConfigValue) -> Any:
    """Thaw a configuration value into plain dicts and lists.

    Args:
        value: Any value from a loaded configuration tree.

    Returns:
        An equivalent structure built from dict, list and scalars, suitable
        for serialisation.
    """
    kind = kind_of(value)
    if kind is ValueKind.TABLE:
        return {key: to_builtin(item) for key, item in value.items()}
    if kind is ValueKind.LIST:
        return [to_builtin(item) for item in value]
    return value
