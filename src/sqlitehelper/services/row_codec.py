"""Conversion between stored and materialized row values.

Structured values (mappings and lists) are stored as JSON text. On the way
back every textual value is offered to the JSON parser; text that is not
valid JSON is kept as-is, which is the normal case for plain string columns.
Text that parses to a JSON string is kept as stored too, so decoding an
already decoded value never changes it again.
"""

import json
from collections.abc import Mapping
from typing import Any


def is_structured(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are accepted by the json module but are not JSON.
    raise ValueError(f"{name} is not valid JSON")


def encode_value(value: Any) -> Any:
    """Serialize structured values to JSON text; scalars pass through.

    Raises:
        TypeError: If a structured value holds something JSON cannot represent.
        ValueError: If a structured value is circular or holds NaN or infinity.
    """
    if is_structured(value):
        return json.dumps(value, allow_nan=False)
    return value


def decode_value(value: Any) -> Any:
    """Parse textual values as JSON, keeping the original on failure."""
    if not isinstance(value, str):
        return value
    try:
        decoded = json.loads(value, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return value
    if isinstance(decoded, str):
        return value
    return decoded


def decode_row(row: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Return a materialized copy of ``row``, or None for a missing row."""
    if row is None:
        return None
    return {key: decode_value(value) for key, value in row.items()}
