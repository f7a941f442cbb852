"""
jsonrecon.values — The JSON value model.

A JSON document is one of six shapes, and nothing else:

    JNull()                         null
    JBool(True)                     true / false
    JNumber(42), JNumber(2.5)       numbers
    JString("hello")                strings
    JObject({"a": JNumber(1)})      objects (key order irrelevant)
    JArray((JNull(), JBool(False))) arrays (order relevant)

There is no implicit coercion between kinds: JBool(True) is never equal to
JNumber(1), even though Python's bool is a subclass of int.  JNumber(1) and
JNumber(1.0) ARE equal; JSON has one number type.

Every value is immutable.  The comparator never rebuilds or reorders its
inputs, so the trees handed to compare() are exactly the trees the resolver
walks later.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Iterator, Union


class Kind(Enum):
    """The six JSON kinds."""
    NULL = "null"
    BOOL = "boolean"
    NUMBER = "number"
    STRING = "string"
    OBJECT = "object"
    ARRAY = "array"


SCALAR_KINDS = frozenset({Kind.NULL, Kind.BOOL, Kind.NUMBER, Kind.STRING})


class JValue:
    """Base class for JSON values.  Not instantiated directly."""
    __slots__ = ()

    kind: ClassVar[Kind]

    def is_scalar(self) -> bool:
        return self.kind in SCALAR_KINDS


@dataclass(frozen=True, slots=True)
class JNull(JValue):
    kind: ClassVar[Kind] = Kind.NULL

    def __repr__(self) -> str:
        return "JNull()"


@dataclass(frozen=True, slots=True)
class JBool(JValue):
    val: bool
    kind: ClassVar[Kind] = Kind.BOOL

    def __repr__(self) -> str:
        return f"JBool({self.val!r})"


@dataclass(frozen=True, slots=True, eq=False)
class JNumber(JValue):
    """
    A JSON number.

    Equality is numeric (1 == 1.0).  NaN equals NaN here, unlike IEEE 754,
    so that comparing a tree with itself never reports a change.
    """
    val: Union[int, float]
    kind: ClassVar[Kind] = Kind.NUMBER

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JNumber):
            return NotImplemented
        if self.val == other.val:
            return True
        return _is_nan(self.val) and _is_nan(other.val)

    def __hash__(self) -> int:
        if _is_nan(self.val):
            return hash(("number", "nan"))
        return hash(("number", self.val))

    def __repr__(self) -> str:
        return f"JNumber({self.val!r})"


@dataclass(frozen=True, slots=True)
class JString(JValue):
    val: str
    kind: ClassVar[Kind] = Kind.STRING

    def __repr__(self) -> str:
        return f"JString({self.val!r})"


@dataclass(frozen=True, slots=True)
class JObject(JValue):
    """
    A JSON object: string keys to values.

    Equality ignores key order.  Iteration follows insertion order, which
    is the order of the source document.

    Examples:
        JObject({"name": JString("Alice"), "age": JNumber(30)})
    """
    entries: dict[str, JValue]
    kind: ClassVar[Kind] = Kind.OBJECT

    def __init__(self, entries: dict[str, JValue]):
        # private copy so callers cannot mutate the value afterwards
        object.__setattr__(self, 'entries', dict(entries))

    def __hash__(self):
        return hash(frozenset(self.entries.items()))

    def __contains__(self, key: str) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, key: str) -> Union[JValue, None]:
        return self.entries.get(key)

    def keys(self):
        return self.entries.keys()

    def __repr__(self) -> str:
        if len(self.entries) <= 3:
            return f"JObject({self.entries})"
        return f"JObject({{...}} len={len(self.entries)})"


@dataclass(frozen=True, slots=True)
class JArray(JValue):
    """
    An ordered JSON array.

    Examples:
        JArray((JNumber(1), JNumber(2), JNumber(3)))
    """
    items: tuple[JValue, ...]
    kind: ClassVar[Kind] = Kind.ARRAY

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[JValue]:
        return iter(self.items)

    def __getitem__(self, index: int) -> JValue:
        return self.items[index]

    def __repr__(self) -> str:
        if len(self.items) <= 5:
            return f"JArray({list(self.items)})"
        return f"JArray([{self.items[0]!r}, ..., {self.items[-1]!r}] len={len(self.items)})"


def _is_nan(val: Any) -> bool:
    return isinstance(val, float) and math.isnan(val)


def scalar_text(value: JValue) -> str:
    """
    Text form of a scalar as it appears in JSON, used for identity labels.

    Integral floats print like integers ("1", not "1.0") so that a value
    read back from JSON text and one built in Python label the same way.
    """
    if isinstance(value, JString):
        return value.val
    if isinstance(value, JNumber):
        v = value.val
        if isinstance(v, float) and v.is_integer():
            return str(int(v))
        return str(v)
    if isinstance(value, JBool):
        return "true" if value.val else "false"
    if isinstance(value, JNull):
        return "null"
    raise TypeError(f"Not a scalar JValue: {type(value).__name__}")
