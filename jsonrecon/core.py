"""
jsonrecon.core — Identity-aware structural comparison of JSON trees.

compare(left, right) walks both trees in lock-step and returns a flat,
ordered list of differences plus a record of every array where elements
were matched by identity rather than by position.

§1  DISPATCH
    kinds differ               → CHANGED at this path, both values; stop
    both scalars               → CHANGED iff the values differ; stop
    both objects               → union of keys (sorted):
                                   left only  → REMOVED
                                   right only → ADDED
                                   both       → recurse
    both arrays                → identity key?  (jsonrecon.identity)
                                   yes → align by identity (jsonrecon.align)
                                   no  → by index: recurse on shared indices,
                                         REMOVED / ADDED past the shorter end

§2  GRANULARITY
    A container's own path is reported only when its kind differs or one
    side lacks it entirely.  A container whose children differ is implied
    by the entries below it.

§3  PATHS
    Each entry carries a display path (identity segments where the array
    was identity-matched: root.users[id=7].name) and a numeric path
    (root.users[2].name).  Matched elements may sit at different indices
    on the two sides, so the right-side numeric path is kept separately.

§4  DETERMINISM
    Same inputs, same output: object keys are visited in sorted order, and
    nothing depends on hashing order or object identity.  Inputs are never
    modified.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from . import paths
from .align import align_arrays
from .config import DEFAULT_CONFIG, DiffConfig
from .formats import from_python, to_python
from .identity import find_identity_key, identity_parts, split_key
from .values import JArray, JObject, JValue

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  RESULT TYPES
# ═══════════════════════════════════════════════════════════════════

class DiffKind(Enum):
    """Kinds of difference."""
    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"


@dataclass(frozen=True)
class DiffEntry:
    """A single difference between the two trees."""
    display_path: str
    numeric_path: str
    kind: DiffKind
    left: Optional[JValue] = None
    right: Optional[JValue] = None
    identity_key: Optional[str] = None
    right_numeric_path: Optional[str] = None

    def numeric_path_for(self, side: str) -> Optional[str]:
        """Numeric path of this entry in the ``left`` or ``right`` tree."""
        if side == "left":
            return None if self.kind is DiffKind.ADDED else self.numeric_path
        if side == "right":
            return self.right_numeric_path
        raise ValueError(f"side must be 'left' or 'right', got {side!r}")

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "displayPath": self.display_path,
            "numericPath": self.numeric_path,
            "type": self.kind.value,
        }
        if self.left is not None:
            out["value1"] = to_python(self.left)
        if self.right is not None:
            out["value2"] = to_python(self.right)
        if self.identity_key is not None:
            out["idKeyUsed"] = self.identity_key
        return out

    def __repr__(self) -> str:
        if self.kind is DiffKind.ADDED:
            return f"ADDED at {self.display_path}: {self.right!r}"
        if self.kind is DiffKind.REMOVED:
            return f"REMOVED at {self.display_path}: {self.left!r}"
        return f"CHANGED at {self.display_path}: {self.left!r} → {self.right!r}"


@dataclass(frozen=True)
class IdentityKeyInfo:
    """An array whose elements were matched by identity."""
    array_path: str
    key: str
    is_composite: bool
    left_size: int
    right_size: int

    @property
    def key_parts(self) -> tuple[str, ...]:
        return split_key(self.key)

    def to_dict(self) -> dict[str, Any]:
        return {
            "arrayPath": self.array_path,
            "idKey": self.key,
            "isComposite": self.is_composite,
            "arraySize1": self.left_size,
            "arraySize2": self.right_size,
        }


@dataclass(frozen=True)
class CompareResult:
    """Outcome of compare(): the differences and the identity keys used."""
    diffs: tuple[DiffEntry, ...]
    identity_keys: tuple[IdentityKeyInfo, ...]

    def by_kind(self, kind: DiffKind) -> list[DiffEntry]:
        return [d for d in self.diffs if d.kind is kind]

    @property
    def added(self) -> list[DiffEntry]:
        return self.by_kind(DiffKind.ADDED)

    @property
    def removed(self) -> list[DiffEntry]:
        return self.by_kind(DiffKind.REMOVED)

    @property
    def changed(self) -> list[DiffEntry]:
        return self.by_kind(DiffKind.CHANGED)

    def __bool__(self) -> bool:
        return bool(self.diffs)


# ═══════════════════════════════════════════════════════════════════
#  COMPARATOR
# ═══════════════════════════════════════════════════════════════════

@dataclass
class _Walk:
    config: DiffConfig
    diffs: list[DiffEntry] = field(default_factory=list)
    identity_keys: list[IdentityKeyInfo] = field(default_factory=list)

    def removed(self, value: JValue, display: str, left_num: str,
                identity_key: Optional[str] = None) -> None:
        self.diffs.append(DiffEntry(display, left_num, DiffKind.REMOVED,
                                    left=value, identity_key=identity_key))

    def added(self, value: JValue, display: str, right_num: str,
              identity_key: Optional[str] = None) -> None:
        self.diffs.append(DiffEntry(display, right_num, DiffKind.ADDED,
                                    right=value, identity_key=identity_key,
                                    right_numeric_path=right_num))

    def changed(self, left: JValue, right: JValue, display: str,
                left_num: str, right_num: str) -> None:
        self.diffs.append(DiffEntry(display, left_num, DiffKind.CHANGED,
                                    left=left, right=right,
                                    right_numeric_path=right_num))

    def compare(self, left: JValue, right: JValue, display: str,
                left_num: str, right_num: str) -> None:
        if left.kind is not right.kind:
            self.changed(left, right, display, left_num, right_num)
            return

        if left.is_scalar():
            if left != right:
                self.changed(left, right, display, left_num, right_num)
            return

        if isinstance(left, JObject):
            self._objects(left, right, display, left_num, right_num)
        elif isinstance(left, JArray):
            self._arrays(left, right, display, left_num, right_num)
        else:
            raise TypeError(f"Unknown JValue type: {type(left)}")

    def _objects(self, left: JObject, right: JObject, display: str,
                 left_num: str, right_num: str) -> None:
        for k in sorted(set(left.keys()) | set(right.keys())):
            child = paths.field_path(display, k)
            lchild = paths.field_path(left_num, k)
            rchild = paths.field_path(right_num, k)
            if k not in right:
                self.removed(left.entries[k], child, lchild)
            elif k not in left:
                self.added(right.entries[k], child, rchild)
            else:
                self.compare(left.entries[k], right.entries[k], child, lchild, rchild)

    def _arrays(self, left: JArray, right: JArray, display: str,
                left_num: str, right_num: str) -> None:
        key = find_identity_key(left, right, self.config)
        if key is None:
            self._by_index(left, right, display, left_num, right_num)
            return

        info = IdentityKeyInfo(display, key, "+" in key, len(left), len(right))
        self.identity_keys.append(info)
        self._by_identity(left, right, info, display, left_num, right_num)

    def _by_index(self, left: JArray, right: JArray, display: str,
                  left_num: str, right_num: str) -> None:
        m, n = len(left), len(right)
        for i in range(max(m, n)):
            child = paths.index_path(display, i)
            lchild = paths.index_path(left_num, i)
            rchild = paths.index_path(right_num, i)
            if i < m and i < n:
                self.compare(left[i], right[i], child, lchild, rchild)
            elif i < m:
                self.removed(left[i], child, lchild)
            else:
                self.added(right[i], child, rchild)

    def _by_identity(self, left: JArray, right: JArray, info: IdentityKeyInfo,
                     display: str, left_num: str, right_num: str) -> None:
        for op in align_arrays(left, right, info.key_parts):
            if op.kind == "added":
                j = op.right_index
                child = (paths.identity_path(display, op.identity) if op.identity
                         else paths.index_path(display, j))
                self.added(right[j], child, paths.index_path(right_num, j),
                           identity_key=info.key if op.identity else None)
                continue

            i = op.left_index
            child = (paths.identity_path(display, op.identity) if op.identity
                     else paths.index_path(display, i))
            lchild = paths.index_path(left_num, i)
            if op.kind == "removed":
                self.removed(left[i], child, lchild,
                             identity_key=info.key if op.identity else None)
            else:
                j = op.right_index
                self.compare(left[i], right[j], child, lchild,
                             paths.index_path(right_num, j))


def _as_value(value: Any) -> JValue:
    return value if isinstance(value, JValue) else from_python(value)


def compare(left: Any, right: Any, config: Optional[DiffConfig] = None) -> CompareResult:
    """
    Compare two JSON trees.

    Accepts JValue trees or plain Python data (converted with from_python).
    Returns the differences in walk order together with the identity keys
    discovered on the way, in pre-order.
    """
    config = config or DEFAULT_CONFIG
    left, right = _as_value(left), _as_value(right)
    walk = _Walk(config)
    root = config.root_name
    walk.compare(left, right, root, root, root)
    logger.debug("compare: %d diffs, %d identity-matched arrays",
                 len(walk.diffs), len(walk.identity_keys))
    return CompareResult(tuple(walk.diffs), tuple(walk.identity_keys))


# ═══════════════════════════════════════════════════════════════════
#  SINGLE-DOCUMENT DETECTION
# ═══════════════════════════════════════════════════════════════════

def detect_identity_keys(value: Any, config: Optional[DiffConfig] = None) -> list[IdentityKeyInfo]:
    """
    Identity keys of one document, each array compared against itself.

    Paths are the ones compare(value, value) would produce, so the records
    can be fed straight to the resolver.
    """
    config = config or DEFAULT_CONFIG
    found: list[IdentityKeyInfo] = []
    _detect(_as_value(value), config.root_name, config, found)
    return found


def _detect(value: JValue, display: str, config: DiffConfig,
            found: list[IdentityKeyInfo]) -> None:
    if isinstance(value, JObject):
        for k in sorted(value.keys()):
            _detect(value.entries[k], paths.field_path(display, k), config, found)
        return
    if not isinstance(value, JArray):
        return

    key = find_identity_key(value, value, config)
    parts = split_key(key) if key else ()
    if key:
        found.append(IdentityKeyInfo(display, key, "+" in key, len(value), len(value)))
    for i, item in enumerate(value.items):
        ident = identity_parts(item, parts) if key else None
        child = paths.identity_path(display, ident) if ident else paths.index_path(display, i)
        _detect(item, child, config, found)
