"""JSON record normalization and pretty printing."""

import json
from typing import Any

from models.errors import ParseError
from models.records import NormalizedRecord


def _reject_constant(name: str) -> Any:
    # NaN and +/-Infinity are not JSON
    raise ValueError(f"non-standard constant {name}")


def normalize(text: str) -> NormalizedRecord:
    """
    Parse decoded text into a record.

    Nested objects, arrays and scalars are kept as-is and keys stay in
    document order.

    Raises:
        ParseError: text is not valid JSON or its top level is not an object.
    """
    try:
        record = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, TypeError) as e:
        raise ParseError(f"invalid JSON: {e}") from e

    if not isinstance(record, dict):
        raise ParseError(f"expected a JSON object, got {type(record).__name__}")

    return record


def _encode_default(value: Any) -> Any:
    # Binary fields (raw transactions) print as hex
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "0x" + bytes(value).hex()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def format_record(record: Any) -> str:
    """Render a record as indented JSON with sorted keys."""
    return json.dumps(record, indent=2, sort_keys=True, default=_encode_default)


def pretty(value: Any) -> str:
    """
    Format any value for the log sink.

    Strings holding a JSON object are re-indented, other strings are
    returned unchanged.
    """
    if isinstance(value, str):
        try:
            return format_record(normalize(value))
        except ParseError:
            return value
    return format_record(value)
