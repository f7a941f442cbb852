"""
jsonrecon.formats — Convert between real-world data and JSON values.

Supported conversions:
    • Python objects (dict, list, tuple, str, int, float, bool, None) ↔ JValue
    • JSON strings ↔ JValue
"""

import json
from typing import Any

from .values import JArray, JBool, JNull, JNumber, JObject, JString, JValue


# ═══════════════════════════════════════════════════════════════════
#  PYTHON OBJECTS ↔ JSON VALUES
# ═══════════════════════════════════════════════════════════════════

def from_python(obj: Any) -> JValue:
    """
    Convert a Python object to a JSON value.

    Mapping:
        None       → JNull()
        bool       → JBool
        int/float  → JNumber
        str        → JString
        list/tuple → JArray(...)
        dict       → JObject(...)   (keys converted with str())

    Nested structures are converted recursively.  Already-converted JValue
    subtrees are kept as they are.  Anything else is not JSON and raises
    TypeError.
    """
    if isinstance(obj, JValue):
        return obj
    if obj is None:
        return JNull()
    if isinstance(obj, bool):  # Must check before int (bool is subclass of int)
        return JBool(obj)
    if isinstance(obj, (int, float)):
        return JNumber(obj)
    if isinstance(obj, str):
        return JString(obj)
    if isinstance(obj, (list, tuple)):
        return JArray(tuple(from_python(item) for item in obj))
    if isinstance(obj, dict):
        return JObject({str(k): from_python(v) for k, v in obj.items()})

    raise TypeError(f"Cannot represent {type(obj).__name__} as a JSON value")


def to_python(val: JValue) -> Any:
    """
    Convert a JSON value back to a plain Python object.

    Inverse of from_python:
        to_python(from_python(obj)) == obj
    for JSON-compatible objects (tuples come back as lists).
    """
    if isinstance(val, JNull):
        return None
    if isinstance(val, (JBool, JNumber, JString)):
        return val.val
    if isinstance(val, JArray):
        return [to_python(item) for item in val.items]
    if isinstance(val, JObject):
        return {k: to_python(v) for k, v in val.entries.items()}
    raise TypeError(f"Unknown JValue type: {type(val)}")


# ═══════════════════════════════════════════════════════════════════
#  JSON STRINGS ↔ JSON VALUES
# ═══════════════════════════════════════════════════════════════════

def from_json(text: str) -> JValue:
    """Parse a JSON string into a JSON value."""
    return from_python(json.loads(text))


def to_json(val: JValue, **kwargs) -> str:
    """Convert a JSON value to a JSON string."""
    return json.dumps(to_python(val), **kwargs)


def _canonical(val: JValue) -> Any:
    if isinstance(val, JNumber) and isinstance(val.val, float) and val.val.is_integer():
        return int(val.val)
    if isinstance(val, JArray):
        return [_canonical(item) for item in val.items]
    if isinstance(val, JObject):
        return {k: _canonical(v) for k, v in val.entries.items()}
    return to_python(val)


def canonical_json(val: JValue) -> str:
    """
    Compact JSON text with sorted keys; equal values give equal text.

    Integral floats are written as integers, since JNumber(1) == JNumber(1.0).
    """
    return json.dumps(_canonical(val), sort_keys=True, separators=(",", ":"),
                      ensure_ascii=False)
