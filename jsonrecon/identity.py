"""
jsonrecon.identity — Identity key discovery.

Two snapshots of "the same" array rarely line up index by index: an element
inserted at the front shifts everything after it.  Comparing such arrays
positionally reports a change at every index past the edit.  If the
elements carry a property that names them (an ``id``, a ``sku``, an
``accountType``), elements can be matched by that property instead.

find_identity_key() looks for such a property, or a pair of properties
whose combined value does the job.

§1  WHEN TO TRY
    • at least one array has more than one element, or both have exactly
      one (the key then names that element in display paths)
    • every non-empty array is at least 80% objects (min_object_proportion)

§2  CANDIDATES
    Property names of a sample object (first object on the left, else on
    the right), ranked:
        1. preferred names (id, key, uuid, name, _id, configured aliases),
           in preference order, case-insensitive
        2. categorical fields (type, accountType, asset_kind, ...)
        3. everything else, lexicographically
    Rank 2 exists because generated identifiers such as ``entityId`` tend
    to be regenerated between snapshots while a category survives.

§3  VALIDATION  (a key, or a combination of keys, qualifies when)
    1. every object in both arrays has it, with a string or number value
    2. its value is unique within each array that has several objects
    3. the two arrays share at least one value

§4  SEARCH ORDER
    single keys, then pairs, then (max_composite_size=3) triples, each in
    rank order.  The first qualifying candidate wins; a composite key is
    reported as "k1+k2".
"""

import logging
import re
from itertools import combinations
from typing import Optional

from .config import DEFAULT_CONFIG, DiffConfig
from .values import JArray, JNumber, JObject, JString, JValue, scalar_text

logger = logging.getLogger(__name__)

COMPOSITE_JOINER = "+"


def split_key(key: str) -> tuple[str, ...]:
    """``"type+subtype"`` → ``("type", "subtype")``."""
    return tuple(key.split(COMPOSITE_JOINER))


def join_key(parts: tuple[str, ...]) -> str:
    return COMPOSITE_JOINER.join(parts)


# ═══════════════════════════════════════════════════════════════════
#  PROJECTION
# ═══════════════════════════════════════════════════════════════════

def _is_key_value(value: Optional[JValue]) -> bool:
    return isinstance(value, (JString, JNumber))


def project_identity(item: JValue, key_parts: tuple[str, ...]) -> Optional[tuple[str, ...]]:
    """
    Identity value of one element: the text of each key property.

    Returns None for non-objects and for objects missing a key property
    (or holding a non-string, non-number value there).
    """
    if not isinstance(item, JObject):
        return None
    values = []
    for k in key_parts:
        v = item.get(k)
        if not _is_key_value(v):
            return None
        values.append(scalar_text(v))
    return tuple(values)


def identity_parts(item: JValue, key_parts: tuple[str, ...]) -> Optional[tuple[tuple[str, str], ...]]:
    """``(("type", "A"), ("subtype", "x"))`` for a display segment."""
    projected = project_identity(item, key_parts)
    if projected is None:
        return None
    return tuple(zip(key_parts, projected))


# ═══════════════════════════════════════════════════════════════════
#  CANDIDATE RANKING
# ═══════════════════════════════════════════════════════════════════

def looks_categorical(name: str, words: tuple[str, ...]) -> bool:
    """
    True for ``type``, ``accountType``, ``asset_kind``; False for
    ``subtype`` (no word boundary before the suffix).
    """
    lowered = name.lower()
    for word in words:
        w = word.lower()
        if lowered == w:
            return True
        if len(name) > len(w) and lowered.endswith(w):
            head = name[:-len(w)]
            first = name[-len(w)]
            if head.endswith(("_", "-")) or first.isupper():
                return True
    return False


_VOLATILE_SUFFIX = re.compile(r"(?:[a-z0-9](?:Id|ID|Uuid|UUID)|_(?:id|uuid))$")


def looks_volatile(name: str) -> bool:
    """Generated-identifier shape: ``entityId``, ``row_uuid``."""
    return bool(_VOLATILE_SUFFIX.search(name))


def rank_candidate_keys(names, config: DiffConfig = DEFAULT_CONFIG) -> list[str]:
    """Order property names by how likely they are to be an identity."""
    preference = config.key_preference
    stable_words = config.stable_key_words

    def rank(name: str):
        lowered = name.lower()
        if lowered in preference:
            return (0, preference.index(lowered), name)
        if looks_categorical(name, stable_words):
            return (1, 0, name)
        return (2, 0, name)

    ranked = sorted(names, key=rank)
    if logger.isEnabledFor(logging.DEBUG):
        volatile = [n for n in ranked if looks_volatile(n) and n.lower() not in preference]
        if volatile:
            logger.debug("candidate keys %s (volatile-looking: %s)", ranked, volatile)
    return ranked


# ═══════════════════════════════════════════════════════════════════
#  VALIDATION
# ═══════════════════════════════════════════════════════════════════

def _objects(arr: JArray) -> list[JObject]:
    return [item for item in arr.items if isinstance(item, JObject)]


def _check_candidate(key_parts: tuple[str, ...], left_objs: list[JObject],
                     right_objs: list[JObject]) -> Optional[str]:
    """Return None if the candidate qualifies, else the reason it does not."""
    value_sets: list[set[tuple[str, ...]]] = []
    for objs in (left_objs, right_objs):
        values: set[tuple[str, ...]] = set()
        for obj in objs:
            projected = project_identity(obj, key_parts)
            if projected is None:
                return "missing or non-scalar value"
            values.add(projected)
        if len(objs) > 1 and len(values) != len(objs):
            return "values not unique"
        value_sets.append(values)

    left_values, right_values = value_sets
    if left_values and right_values and not (left_values & right_values):
        return "no overlap between sides"
    return None


def find_identity_key(left: JArray, right: JArray,
                      config: DiffConfig = DEFAULT_CONFIG) -> Optional[str]:
    """
    Find a property (or combination) that identifies elements of both arrays.

    Returns the key name ("id", "type+subtype") or None, in which case the
    caller compares the arrays position by position.
    """
    m, n = len(left.items), len(right.items)
    # one element against one still gets a key: it names the element in paths
    if m <= 1 and n <= 1 and not (m == 1 and n == 1):
        return None

    left_objs = _objects(left)
    right_objs = _objects(right)

    # Heuristic: only consider a key if the arrays are predominantly objects
    for objs, size in ((left_objs, m), (right_objs, n)):
        if size and len(objs) / size < config.min_object_proportion:
            return None
    if not left_objs and not right_objs:
        return None

    sample = left_objs[0] if left_objs else right_objs[0]
    candidates = rank_candidate_keys(list(sample.keys()), config)

    for size in range(1, config.max_composite_size + 1):
        for key_parts in combinations(candidates, size):
            reason = _check_candidate(key_parts, left_objs, right_objs)
            if reason is None:
                key = join_key(key_parts)
                logger.debug("identity key %r for arrays of %d/%d elements", key, m, n)
                return key
            logger.debug("rejected key %r: %s", join_key(key_parts), reason)

    logger.debug("no identity key among %s", candidates)
    return None
