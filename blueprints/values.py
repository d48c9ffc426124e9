"""Tagged configuration values and their text form."""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from blueprints.errors import SourceMalformedError


class ValueKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    LIST = "list"
    RECORD = "record"


def kind_of(value: Any) -> ValueKind:
    # bool before int: bool is an int subclass
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if value is None:
        return ValueKind.NULL
    if isinstance(value, (list, tuple)):
        for item in value:
            kind_of(item)
        return ValueKind.LIST
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise SourceMalformedError(f"Record keys must be strings, got {key!r}")
            kind_of(item)
        return ValueKind.RECORD
    raise SourceMalformedError(f"Unsupported configuration value of type {type(value).__name__}")


def _normalize(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, (list, tuple)):
        return [_normalize(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize(item) for key, item in value.items()}
    return value


def serialize(value: Any) -> str:
    """Strings pass through; everything else becomes compact JSON."""
    if kind_of(value) is ValueKind.STRING:
        return value
    return json.dumps(_normalize(value), separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class ConfigValue:
    kind: ValueKind
    raw: Any

    @classmethod
    def of(cls, value: Any) -> "ConfigValue":
        return cls(kind_of(value), value)

    @property
    def text(self) -> str:
        return serialize(self.raw)
