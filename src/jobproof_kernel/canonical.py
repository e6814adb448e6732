"""
Canonical JSON serialization for evidence bundles.

Two bundles with the same content MUST serialize to the same bytes no
matter how their keys were inserted, otherwise a stored seal could not
be re-verified.

Rules:
- Object keys sorted lexicographically by Unicode code point
- No whitespace between tokens
- Keys whose value is None are dropped: an absent key and a null key
  canonicalize identically
- None inside an array stays "null" (array positions are significant)
- Numbers: shortest round-trip, integral floats without ".0"
- Strings: minimal escaping (control chars, backslash, double-quote)
"""

import json
import math
from typing import Any

from .errors import CanonicalizationError


def canonicalize(value: Any) -> Any:
    """
    Return a copy of value with every mapping rebuilt in sorted key order.

    Lists keep their order, scalars pass through unchanged and None-valued
    mapping entries are removed. Non-string keys raise CanonicalizationError.
    """
    if isinstance(value, dict):
        for key in value:
            if not isinstance(key, str):
                raise CanonicalizationError(
                    f"Object keys must be strings, got {type(key).__name__}"
                )
        return {
            key: canonicalize(value[key])
            for key in sorted(value.keys())
            if value[key] is not None
        }
    if isinstance(value, (list, tuple)):
        return [canonicalize(item) for item in value]
    return value


def canonical_json(value: Any) -> str:
    """
    Serialize a value to canonical JSON.

    Args:
        value: Any JSON-serializable value

    Returns:
        Canonical JSON string with sorted keys and no whitespace

    Raises:
        CanonicalizationError: value holds a non-finite number or a type
            that has no JSON representation
    """
    return _serialize_value(canonicalize(value))


def canonical_bytes(value: Any) -> bytes:
    """UTF-8 encoding of canonical_json(value)."""
    return canonical_json(value).encode("utf-8")


def _serialize_value(value: Any) -> str:
    if value is None:
        return "null"

    if isinstance(value, bool):
        # Must check bool before int (bool is subclass of int in Python)
        return "true" if value else "false"

    if isinstance(value, (int, float)):
        return _serialize_number(value)

    if isinstance(value, str):
        return _serialize_string(value)

    if isinstance(value, (list, tuple)):
        return _serialize_array(value)

    if isinstance(value, dict):
        return _serialize_object(value)

    raise CanonicalizationError(
        f"Cannot canonicalize value of type {type(value).__name__}"
    )


def _serialize_number(num: float | int) -> str:
    """Shortest representation that round-trips."""
    if isinstance(num, float) and (math.isnan(num) or math.isinf(num)):
        raise CanonicalizationError(f"Non-finite number is not canonicalizable: {num!r}")

    # Integer handling: avoid scientific notation for reasonable integers
    if isinstance(num, int) or num.is_integer():
        int_val = int(num)
        if abs(int_val) < 10**20:
            return str(int_val)

    result = json.dumps(num)
    if result.endswith(".0"):
        result = result[:-2]
    return result


def _serialize_string(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _serialize_array(arr: list | tuple) -> str:
    items = [_serialize_value(item) for item in arr]
    return "[" + ",".join(items) + "]"


def _serialize_object(obj: dict) -> str:
    """Serialize an object already rebuilt by canonicalize()."""
    pairs = [_serialize_string(key) + ":" + _serialize_value(val) for key, val in obj.items()]
    return "{" + ",".join(pairs) + "}"
