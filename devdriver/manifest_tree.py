"""A uniform view over the value trees of JSON, YAML and TOML manifests."""

from __future__ import annotations

import abc
import datetime
import json
import re
import tomllib
from collections.abc import Iterator, Mapping
from typing import Any, ClassVar, Self

import yaml

_U64_MAX = 2**64 - 1
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


def _is_int(raw: Any) -> bool:
    return isinstance(raw, int) and not isinstance(raw, bool)


class ManifestValueError(Exception):
    """A manifest value had a different type than expected."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(expected, actual)
        self.expected = expected
        self.actual = actual

    def __str__(self) -> str:
        return (
            "Value had an unexpected type. "
            f"`{self.expected}` was expected, but the actual value was `{self.actual}`"
        )


class ValueMap:
    """An ordered map from string keys to manifest values."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, Value]) -> None:
        self._entries = dict(entries)

    def items(self) -> Iterator[tuple[str, Value]]:
        """Iterate over key and value pairs in document order."""
        return iter(self._entries.items())

    def get(self, key: str) -> Value | None:
        """The value under ``key``, or ``None`` if absent."""
        return self._entries.get(key)

    def __getitem__(self, key: str) -> Value:
        return self._entries[key]

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValueMap):
            return NotImplemented
        return self._entries == other._entries

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ValueMap({self._entries!r})"


class Value(abc.ABC):
    """A node of a parsed manifest with typed accessors."""

    _INT_AS_FLOAT: ClassVar[bool] = False

    __slots__ = ("raw",)

    def __init__(self, raw: Any) -> None:
        self.raw = raw

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return type(self) is type(other) and self.raw == other.raw

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.raw!r})"

    @abc.abstractmethod
    def type_name(self) -> str:
        """A short name of the kind of value held."""

    def _error(self, expected: str) -> ManifestValueError:
        return ManifestValueError(expected, self.type_name())

    def as_null(self) -> None:
        """Check that the value is null."""
        if self.raw is None:
            return None
        raise self._error("null")

    def as_bool(self) -> bool:
        """The value as a boolean."""
        if isinstance(self.raw, bool):
            return self.raw
        raise self._error("bool")

    def as_uint(self) -> int:
        """The value as an unsigned 64-bit integer."""
        if _is_int(self.raw) and 0 <= self.raw <= _U64_MAX:
            return self.raw
        raise self._error("uint")

    def as_int(self) -> int:
        """The value as a signed 64-bit integer."""
        if _is_int(self.raw) and _I64_MIN <= self.raw <= _I64_MAX:
            return self.raw
        raise self._error("int")

    def as_float(self) -> float:
        """The value as a float."""
        if isinstance(self.raw, float):
            return self.raw
        if self._INT_AS_FLOAT and _is_int(self.raw):
            return float(self.raw)
        raise self._error("float")

    def as_string(self) -> str:
        """The value as a string."""
        if isinstance(self.raw, str):
            return self.raw
        raise self._error("string")

    def as_array(self) -> list[Self]:
        """The value as a list of values."""
        if isinstance(self.raw, list):
            return [type(self)(item) for item in self.raw]
        raise self._error("array")

    def as_map(self) -> ValueMap:
        """The value as a map of string keys to values."""
        if not isinstance(self.raw, dict):
            raise self._error("map")
        entries: dict[str, Value] = {}
        for key, item in self.raw.items():
            if not isinstance(key, str):
                raise TypeError(f"map key {key!r} is not a string")
            entries[key] = type(self)(item)
        return ValueMap(entries)

    @classmethod
    @abc.abstractmethod
    def from_string(cls, source: str) -> Self:
        """Parse ``source`` into a value tree."""


def _json_int(text: str) -> int | float:
    number = int(text)
    if _I64_MIN <= number <= _U64_MAX:
        return number
    return float(number)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON number: {name}")


class JsonValue(Value):
    """A value of a JSON document."""

    _INT_AS_FLOAT = True
    __slots__ = ()

    def type_name(self) -> str:
        raw = self.raw
        if raw is None:
            return "null"
        if isinstance(raw, bool):
            return "bool"
        if _is_int(raw):
            if 0 <= raw <= _U64_MAX:
                return "uint"
            if _I64_MIN <= raw < 0:
                return "int"
            return "float"
        if isinstance(raw, float):
            return "float"
        if isinstance(raw, str):
            return "string"
        if isinstance(raw, list):
            return "array"
        if isinstance(raw, dict):
            return "map"
        raise TypeError(f"{type(raw).__name__} is not a JSON value")

    @classmethod
    def from_string(cls, source: str) -> Self:
        return cls(
            json.loads(source, parse_int=_json_int, parse_constant=_reject_constant)
        )


_YAML_BOOL = "tag:yaml.org,2002:bool"
_YAML_INT = "tag:yaml.org,2002:int"
_YAML_TIMESTAMP = "tag:yaml.org,2002:timestamp"


class _YamlLoader(yaml.SafeLoader):
    """Safe loader with YAML 1.2 core schema booleans and integers."""


_YamlLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp)
        for tag, regexp in resolvers
        if tag not in (_YAML_BOOL, _YAML_INT, _YAML_TIMESTAMP)
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
_YamlLoader.add_implicit_resolver(
    _YAML_BOOL,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)
_YamlLoader.add_implicit_resolver(
    _YAML_INT,
    re.compile(r"^(?:[-+]?[0-9]+|0o[0-7]+|0x[0-9a-fA-F]+)$"),
    list("-+0123456789"),
)


def _construct_yaml_int(loader: yaml.SafeLoader, node: yaml.Node) -> int:
    text = loader.construct_scalar(node)
    if text.startswith("0x"):
        return int(text[2:], 16)
    if text.startswith("0o"):
        return int(text[2:], 8)
    return int(text, 10)


def _construct_yaml_bool(loader: yaml.SafeLoader, node: yaml.Node) -> bool:
    return loader.construct_scalar(node).lower() == "true"


_YamlLoader.add_constructor(_YAML_INT, _construct_yaml_int)
_YamlLoader.add_constructor(_YAML_BOOL, _construct_yaml_bool)

_SIGNED_BINARY = re.compile(r"[+-]?[01]+")
_UNSIGNED_BINARY = re.compile(r"\+?[01]+")


class YamlValue(Value):
    """A value of a YAML document."""

    __slots__ = ()

    def type_name(self) -> str:
        raw = self.raw
        if raw is None:
            return "null"
        if isinstance(raw, bool):
            return "bool"
        if _is_int(raw):
            return "(u)int" if raw >= 0 else "int"
        if isinstance(raw, float):
            return "float"
        if isinstance(raw, str):
            return "string"
        if isinstance(raw, list):
            return "array"
        if isinstance(raw, dict):
            return "map"
        return "bad value"

    def as_null(self) -> None:
        """Check that the value is a YAML null (``~``, ``null`` or empty)."""
        if self.raw is None:
            return None
        raise self._error("null")

    def _binary(self, pattern: re.Pattern[str], low: int, high: int) -> int | None:
        if not isinstance(self.raw, str) or not self.raw.startswith("0b"):
            return None
        digits = self.raw[2:]
        if not pattern.fullmatch(digits):
            return None
        number = int(digits, 2)
        return number if low <= number <= high else None

    def as_uint(self) -> int:
        """The value as an unsigned integer; ``0b`` strings are read as binary."""
        number = self._binary(_UNSIGNED_BINARY, 0, _U64_MAX)
        if number is not None:
            return number
        if _is_int(self.raw) and 0 <= self.raw <= _I64_MAX:
            return self.raw
        raise self._error("uint")

    def as_int(self) -> int:
        """The value as a signed integer; ``0b`` strings are read as binary."""
        number = self._binary(_SIGNED_BINARY, _I64_MIN, _I64_MAX)
        if number is not None:
            return number
        return super().as_int()

    @classmethod
    def from_string(cls, source: str) -> Self:
        documents = list(yaml.load_all(source, Loader=_YamlLoader))
        if not documents:
            raise ValueError("YAML source holds no document")
        return cls(documents[0])


class TomlValue(Value):
    """A value of a TOML document."""

    __slots__ = ()

    def type_name(self) -> str:
        raw = self.raw
        if isinstance(raw, str):
            return "string"
        if isinstance(raw, bool):
            return "bool"
        if _is_int(raw):
            return "(u)int" if raw >= 0 else "int"
        if isinstance(raw, float):
            return "float"
        if isinstance(raw, (datetime.datetime, datetime.date, datetime.time)):
            return "datetime"
        if isinstance(raw, list):
            return "array"
        if isinstance(raw, dict):
            return "map"
        raise TypeError(f"{type(raw).__name__} is not a TOML value")

    def as_null(self) -> None:
        """TOML has no null, so this always raises."""
        raise self._error("null")

    @classmethod
    def from_string(cls, source: str) -> Self:
        return cls(tomllib.loads(source))


_KINDS: dict[str, type[Value]] = {
    "json": JsonValue,
    "yaml": YamlValue,
    "toml": TomlValue,
}


def parse_manifest(source: str, kind: str | type[Value]) -> Value:
    """Parse ``source`` as ``kind``: ``"json"``, ``"yaml"``, ``"toml"`` or a Value class."""
    if isinstance(kind, str):
        try:
            value_type = _KINDS[kind.lower()]
        except KeyError:
            raise ValueError(
                f"unknown manifest kind {kind!r}; expected one of {', '.join(_KINDS)}"
            ) from None
    elif isinstance(kind, type) and issubclass(kind, Value):
        value_type = kind
    else:
        raise TypeError(f"manifest kind must be a name or a Value class, not {kind!r}")
    return value_type.from_string(source)