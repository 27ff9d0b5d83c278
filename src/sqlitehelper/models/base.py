import re
from collections.abc import Mapping
from typing import Any

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def ensure_identifier(value: Any, field_name: str) -> str:
    """Return ``value`` if it can be interpolated into SQL as a bare identifier."""
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    if not _IDENTIFIER.fullmatch(value):
        raise ValueError(f"{field_name} must be a plain SQL identifier, got {value!r}")
    return value


def ensure_row_mapping(value: Any, field_name: str) -> dict[str, Any]:
    """Copy a non-empty mapping whose keys are SQL identifiers into a dict."""
    if value is None:
        raise ValueError(f"{field_name} is required")
    if not isinstance(value, Mapping):
        raise ValueError(f"{field_name} must be a mapping of column names to values")
    if not value:
        raise ValueError(f"{field_name} cannot be empty")
    for key in value:
        ensure_identifier(key, f"{field_name} key")
    return dict(value)


def ensure_column_types(value: Any) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError("columns must be a mapping of column names to SQL types")
    for name, declared_type in value.items():
        ensure_identifier(name, "column name")
        if not isinstance(declared_type, str) or not declared_type.strip():
            raise ValueError(f"declared type for column {name!r} must be a non-empty string")
    return dict(value)
