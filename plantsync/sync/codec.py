"""
Record conversion between SQLite rows / pydantic records and remote field maps.

Remote documents are schema-less: any field may be missing, numbers may arrive
as int or float, and older clients wrote NULL as the text "null". Decoding
tolerates all of that and normalises to the record's declared types.
"""

import logging
import sqlite3
from enum import Enum
from typing import Any, Mapping, Optional, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError

from ..storage.models import EntityKind, RECORD_TYPES
from .errors import RecordDecodeError

logger = logging.getLogger(__name__)

LEGACY_NULL = "null"

_TRUE_STRINGS = {"1", "true", "yes"}
_FALSE_STRINGS = {"0", "false", "no", ""}


def _unwrap_optional(annotation) -> tuple[Any, bool]:
    """Return (inner type, nullable) for an Optional[...] annotation."""
    if get_origin(annotation) is Union:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        return args[0], True
    return annotation, False


def _to_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise RecordDecodeError(name, value, "expected a boolean or 0/1")


def _to_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise RecordDecodeError(name, value, "expected an integral number")
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
        try:
            return _to_int(name, float(value))
        except ValueError:
            pass
    raise RecordDecodeError(name, value, "expected an integer")


def _to_float(name: str, value: Any) -> float:
    if isinstance(value, (bool, int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            pass
    raise RecordDecodeError(name, value, "expected a number")


def _to_str(name: str, value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        # Epoch millis pushed through a double keep their integral form
        return str(int(value)) if value.is_integer() else repr(value)
    raise RecordDecodeError(name, value, "expected text")


def _to_enum(enum_cls, name: str, value: Any) -> Enum:
    try:
        return enum_cls(value)
    except ValueError:
        raise RecordDecodeError(name, value, f"not a valid {enum_cls.__name__}") from None


def coerce_value(name: str, annotation, value: Any) -> Any:
    """Normalise one remote value to the declared field type.

    Returns None when the field should fall back to its zero value
    (non-nullable) or be stored as NULL (nullable). The legacy text "null"
    counts as NULL for every field.
    """
    inner, _ = _unwrap_optional(annotation)

    if value is None or value == LEGACY_NULL:
        return None

    if inner is bool:
        return _to_bool(name, value)
    if inner is int:
        return _to_int(name, value)
    if inner is float:
        return _to_float(name, value)
    if inner is str:
        return _to_str(name, value)
    if isinstance(inner, type) and issubclass(inner, Enum):
        return _to_enum(inner, name, value)
    return value


class RecordCodec:
    """Stateless converter between local records and remote field maps."""

    def encode(self, record: BaseModel) -> dict:
        """Encode a record keyed by column name. Booleans become 0/1, NULL stays None."""
        fields = record.model_dump(by_alias=True, mode="json")
        return {
            key: (1 if value else 0) if isinstance(value, bool) else value
            for key, value in fields.items()
        }

    def encode_row(self, row: sqlite3.Row) -> dict:
        """Encode a raw SQLite row keeping each column's storage type."""
        fields = {}
        for column in row.keys():
            value = row[column]
            if value is None or isinstance(value, (int, float)):
                fields[column] = value
            elif isinstance(value, bytes):
                fields[column] = value.decode("utf-8", errors="replace")
            else:
                fields[column] = str(value)
        return fields

    def decode(self, kind: EntityKind, fields: Optional[Mapping[str, Any]]) -> BaseModel:
        """Decode a remote field map into the record type for kind.

        Every field is optional: missing fields keep the record's zero value.
        Raises RecordDecodeError for values that cannot be normalised.
        """
        record_cls = RECORD_TYPES[EntityKind(kind)]
        if not isinstance(fields, Mapping):
            raise RecordDecodeError("<document>", fields, "expected a field map")

        values = {}
        for name, info in record_cls.model_fields.items():
            key = info.alias or name
            if key not in fields:
                continue
            coerced = coerce_value(key, info.annotation, fields[key])
            if coerced is None and not _unwrap_optional(info.annotation)[1]:
                continue
            values[name] = coerced

        try:
            return record_cls.model_validate(values)
        except ValidationError as e:
            raise RecordDecodeError("<document>", dict(fields), str(e)) from e
