"""
jsonrecon.resolve — Turn display paths and array patterns into positions.

A diff entry found under an identity-matched array names its element by
identity (``root.users[id=7].name``).  The two source trees are rendered
independently, and element id=7 may be the third user on the left and
the first on the right.  The functions here look the element up in each
tree separately and return concrete numeric paths.

Lookups that fail are not errors: an ADDED entry has no left-side node, so
resolving it on the left yields None.  Only a path that cannot be
tokenized raises (PathSyntaxError).

The identity key records come from compare() or detect_identity_keys();
a record applies to the array at exactly its display path, or failing
that, to any array with the same array pattern.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, NamedTuple, Optional, Sequence, Union

from . import paths
from .config import DEFAULT_CONFIG, DiffConfig
from .core import IdentityKeyInfo
from .errors import PathSyntaxError
from .formats import from_python
from .identity import project_identity
from .paths import Field, Identity, Index, Wildcard
from .values import JArray, JObject, JValue

logger = logging.getLogger(__name__)


class Trees(NamedTuple):
    """The two compared documents."""
    left: Any
    right: Any


TreesLike = Union[Trees, Mapping[str, Any]]


@dataclass(frozen=True)
class PatternMatch:
    """Corresponding elements of an array pattern, one numeric path per side."""
    left_path: Optional[str]
    right_path: Optional[str]
    matching_identity: Optional[str] = None


@dataclass(frozen=True)
class PathPair:
    """A display path resolved on both sides."""
    left_path: Optional[str]
    right_path: Optional[str]


# ═══════════════════════════════════════════════════════════════════
#  HELPERS
# ═══════════════════════════════════════════════════════════════════

def _tree(trees: TreesLike, side: str) -> Optional[JValue]:
    """
    One side as a JValue.  A plain ``None`` is the JSON document ``null``;
    only a mapping without the side's key leaves that side absent.
    """
    if isinstance(trees, Mapping):
        if side not in trees:
            return None
        value = trees[side]
    else:
        value = getattr(trees, side)
    if isinstance(value, JValue):
        return value
    return from_python(value)


class _KeyIndex:
    """Identity key records by display path and by array pattern."""

    def __init__(self, identity_keys: Sequence[IdentityKeyInfo], root: str):
        self.root = root
        self.by_path: dict[str, IdentityKeyInfo] = {}
        self.by_pattern: dict[str, IdentityKeyInfo] = {}
        for info in identity_keys or ():
            self.by_path.setdefault(info.array_path, info)
            self.by_pattern.setdefault(self._pattern(info.array_path), info)

    def _pattern(self, display_path: str) -> str:
        return paths.to_array_pattern(display_path, root=self.root)

    def lookup(self, display_path: str) -> Optional[IdentityKeyInfo]:
        info = self.by_path.get(display_path)
        if info is None:
            info = self.by_pattern.get(self._pattern(display_path))
        return info


def _find_by_identity(arr: JArray, segment: Identity,
                      info: Optional[IdentityKeyInfo]) -> Optional[int]:
    # a record found by pattern may name a different key; trust the segment then
    if info is not None and info.key != segment.key:
        logger.debug("segment key %s differs from recorded key %s at %s",
                     segment.key, info.key, info.array_path)
    parts, wanted = segment.key_parts, segment.values
    for i, item in enumerate(arr.items):
        if project_identity(item, parts) == wanted:
            return i
    return None


def _walk_display(segments: list, tree: Optional[JValue], index: _KeyIndex,
                  root: str) -> Optional[str]:
    """Numeric path of a display path in one tree, or None."""
    current = tree
    display = numeric = root
    for seg in segments:
        if current is None:
            return None
        if isinstance(seg, Field):
            if not isinstance(current, JObject) or seg.name not in current:
                return None
            current = current.entries[seg.name]
            display = paths.field_path(display, seg.name)
            numeric = paths.field_path(numeric, seg.name)
        elif isinstance(seg, Index):
            if not isinstance(current, JArray) or seg.position >= len(current):
                return None
            current = current[seg.position]
            display = paths.index_path(display, seg.position)
            numeric = paths.index_path(numeric, seg.position)
        elif isinstance(seg, Identity):
            if not isinstance(current, JArray):
                return None
            position = _find_by_identity(current, seg, index.lookup(display))
            if position is None:
                return None
            current = current[position]
            display = paths.identity_path(display, seg.parts)
            numeric = paths.index_path(numeric, position)
        else:
            raise TypeError(f"Unexpected segment in display path: {seg!r}")
    return numeric


# ═══════════════════════════════════════════════════════════════════
#  DISPLAY PATH → VIEWER PATH
# ═══════════════════════════════════════════════════════════════════

def id_based_path_to_viewer_path(path: str, side: str, trees: TreesLike,
                                 identity_keys: Sequence[IdentityKeyInfo],
                                 config: Optional[DiffConfig] = None) -> Optional[str]:
    """
    Resolve a display path on one side and return its viewer path.

        root.users[id=7].name, "right"  →  "right_root.users[0].name"

    Returns None when some segment does not exist on that side.
    """
    config = config or DEFAULT_CONFIG
    if side not in paths.SIDES:
        raise PathSyntaxError(path, f"side must be 'left' or 'right', got {side!r}",
                              side=side)
    segments = paths.parse_path(path, root=config.root_name, side=side)
    index = _KeyIndex(identity_keys, config.root_name)
    numeric = _walk_display(segments, _tree(trees, side), index, config.root_name)
    if numeric is None:
        logger.debug("%s does not resolve on the %s side", path, side)
        return None
    return paths.to_viewer_path(numeric, side)


def resolve_display_path(path: str, trees: TreesLike,
                         identity_keys: Sequence[IdentityKeyInfo],
                         config: Optional[DiffConfig] = None) -> PathPair:
    """Numeric paths of a display path on both sides (None where absent)."""
    config = config or DEFAULT_CONFIG
    segments = paths.parse_path(path, root=config.root_name)
    index = _KeyIndex(identity_keys, config.root_name)
    return PathPair(
        _walk_display(segments, _tree(trees, "left"), index, config.root_name),
        _walk_display(segments, _tree(trees, "right"), index, config.root_name),
    )


def numeric_to_display_path(numeric_path: str, tree: Any,
                            identity_keys: Sequence[IdentityKeyInfo],
                            config: Optional[DiffConfig] = None) -> Optional[str]:
    """
    The reverse direction, for one tree: replace positions with identities
    wherever the array has an identity key.

        root.users[2].name  →  root.users[id=7].name
    """
    config = config or DEFAULT_CONFIG
    root = config.root_name
    segments = paths.parse_path(numeric_path, root=root)
    index = _KeyIndex(identity_keys, root)

    current = tree if isinstance(tree, JValue) else from_python(tree)
    display = root
    for seg in segments:
        if isinstance(seg, Identity):
            raise PathSyntaxError(numeric_path, "identity segment in a numeric path")
        if isinstance(seg, Field):
            if not isinstance(current, JObject) or seg.name not in current:
                return None
            current = current.entries[seg.name]
            display = paths.field_path(display, seg.name)
            continue
        if not isinstance(current, JArray) or seg.position >= len(current):
            return None
        item = current[seg.position]
        info = index.lookup(display)
        projected = project_identity(item, info.key_parts) if info else None
        # a record matched by pattern may not name this element uniquely
        if projected is not None and sum(
                project_identity(other, info.key_parts) == projected
                for other in current.items) == 1:
            display = paths.identity_path(display, tuple(zip(info.key_parts, projected)))
        else:
            display = paths.index_path(display, seg.position)
        current = item
    return display


# ═══════════════════════════════════════════════════════════════════
#  ARRAY PATTERN → MATCHING ELEMENTS
# ═══════════════════════════════════════════════════════════════════

def _non_empty_array(value: Optional[JValue]) -> Optional[JArray]:
    if isinstance(value, JArray) and len(value):
        return value
    return None


def _candidates(left: Optional[JValue], right: Optional[JValue],
                info: Optional[IdentityKeyInfo]) -> list:
    """
    Element pairs a ``[]`` segment may stand for, best first.

    With an identity key: left elements whose identity is also on the
    right, in left order, each side at its own index.  After those (or
    alone, without a key): position k on each side that has one.
    """
    larr, rarr = _non_empty_array(left), _non_empty_array(right)
    shared = []
    if info is not None and larr is not None and rarr is not None:
        parts = info.key_parts
        right_ids: dict[tuple[str, ...], int] = {}
        for j, item in enumerate(rarr.items):
            projected = project_identity(item, parts)
            if projected is not None:
                right_ids.setdefault(projected, j)
        for i, item in enumerate(larr.items):
            projected = project_identity(item, parts)
            if projected is not None and projected in right_ids:
                shared.append((i, right_ids[projected], tuple(zip(parts, projected))))
        if not shared:
            logger.debug("no identity shared between sides for %s", info.array_path)

    m = len(larr) if larr is not None else 0
    n = len(rarr) if rarr is not None else 0
    return shared + [(k if k < m else None, k if k < n else None, None)
                     for k in range(max(m, n))]


_NO_MATCH = PatternMatch(None, None)


def _match_pattern(segments: list, pos: int, left: Optional[JValue], right: Optional[JValue],
                   display: str, left_num: str, right_num: str,
                   index: _KeyIndex) -> PatternMatch:
    while isinstance(segments[pos], Field):
        name = segments[pos].name
        left = left.get(name) if isinstance(left, JObject) else None
        right = right.get(name) if isinstance(right, JObject) else None
        if left is None and right is None:
            return _NO_MATCH
        display = paths.field_path(display, name)
        left_num = paths.field_path(left_num, name)
        right_num = paths.field_path(right_num, name)
        pos += 1

    info = index.lookup(display)
    last = pos == len(segments) - 1
    if last and info is None:
        logger.debug("no identity key recorded for %s", display)
        return _NO_MATCH
    candidates = _candidates(left, right, info)
    best = _NO_MATCH
    for i, j, ident in candidates:
        if ident:
            element_display = paths.identity_path(display, ident)
            matching = Identity(ident).label
        else:
            element_display = paths.index_path(display, i if i is not None else j)
            matching = None
        if last:
            return PatternMatch(
                paths.index_path(left_num, i) if i is not None else None,
                paths.index_path(right_num, j) if j is not None else None,
                matching,
            )
        found = _match_pattern(
            segments, pos + 1,
            left[i] if i is not None else None,
            right[j] if j is not None else None,
            element_display,
            paths.index_path(left_num, i) if i is not None else left_num,
            paths.index_path(right_num, j) if j is not None else right_num,
            index,
        )
        if found.left_path is not None and found.right_path is not None:
            return found
        if best is _NO_MATCH and (found.left_path is not None or found.right_path is not None):
            best = found
    return best


def resolve_array_pattern_to_matching_elements(
        pattern: str, trees: TreesLike, identity_keys: Sequence[IdentityKeyInfo],
        config: Optional[DiffConfig] = None) -> PatternMatch:
    """
    Find corresponding elements of the array addressed by ``pattern``.

        accounts[].contributions[]  →  PatternMatch(
            left_path="root.accounts[1].contributions[0]",
            right_path="root.accounts[1].contributions[1]",
            matching_identity="id=c-42")

    Both trees are walked independently; left and right indices are never
    assumed to coincide.  An intermediate ``[]`` stands for the first
    corresponding pair of elements through which the rest of the pattern
    resolves on both sides (failing that, on one side).  The final ``[]``
    needs an identity key record for its array: it picks the first element
    whose identity both sides share, else the first element of each side.
    Without a record both paths are None.  A side on which the array is
    missing or empty gets None.
    """
    config = config or DEFAULT_CONFIG
    root = config.root_name
    segments = paths.parse_path(pattern, root=root, allow_wildcards=True)
    if not segments or not isinstance(segments[-1], Wildcard):
        raise PathSyntaxError(pattern, "array pattern must end with '[]'")
    if any(isinstance(s, (Index, Identity)) for s in segments):
        raise PathSyntaxError(pattern, "array pattern may only contain names and '[]'")

    index = _KeyIndex(identity_keys, root)
    result = _match_pattern(segments, 0, _tree(trees, "left"), _tree(trees, "right"),
                            root, root, root, index)
    if result.left_path is None or result.right_path is None:
        logger.debug("pattern %s resolved partially: %s", pattern, result)
    return result
