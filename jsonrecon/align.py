"""
jsonrecon.align — Identity-keyed sequence alignment.

Given two arrays and an identity key, produce the ordered edit script that
turns the left array into the right one:

    left   [a, b, c, d]            (letters = identity values)
    right  [b, x, c, a]

    ops    common a  (moved)  left 0 ↔ right 3
           common b           left 1 ↔ right 0
           added  x           right 1
           common c           left 2 ↔ right 2
           removed d          left 3

§1  EQUALITY
    Two elements are "the same" when their projected identity is equal;
    their contents may differ (that is what the comparator recurses into).
    Elements without an identity (the up-to-20% non-objects an identity
    array may hold) are matched on their canonical JSON text instead, the
    k-th occurrence on the left with the k-th occurrence on the right.

§2  ALIGNMENT
    The anchors are a longest common subsequence of the two projected
    sequences.  The textbook LCS is the O(m·n) dynamic programme

        L[i][j] = L[i-1][j-1] + 1               if a[i] = b[j]
                = max(L[i-1][j], L[i][j-1])     otherwise

    but projections are unique on each side, so every left element has at
    most one partner on the right, and an LCS is exactly a longest
    increasing run of partner positions.  That is found in O(n log n)
    with patience sorting.

§3  MOVES
    Elements present on both sides but off the LCS were reordered.  They
    are still paired (kind "common", moved=True) so a pure reorder never
    shows up as a removal plus an addition of the same element.

§4  ORDER
    Between consecutive anchors: left-side ops (removed / moved) in left
    order, then right-only additions in right order, then the anchor.
"""

from bisect import bisect_left
from collections import Counter
from dataclasses import dataclass
from typing import Hashable, Optional

from .formats import canonical_json
from .identity import identity_parts, project_identity
from .values import JArray


@dataclass(frozen=True, slots=True)
class AlignOp:
    """
    One step of an alignment.

    kind is "removed" (left only), "added" (right only) or "common" (paired).
    identity holds the (key, value) pairs of the element's identity, or
    None for elements that have none.
    """
    kind: str
    left_index: Optional[int]
    right_index: Optional[int]
    identity: Optional[tuple[tuple[str, str], ...]] = None
    moved: bool = False

    def __repr__(self) -> str:
        where = f"L{self.left_index}" if self.left_index is not None else ""
        if self.right_index is not None:
            where += ("↔" if where else "") + f"R{self.right_index}"
        label = ",".join(f"{k}={v}" for k, v in self.identity) if self.identity else "-"
        flag = " moved" if self.moved else ""
        return f"AlignOp({self.kind} {where} [{label}]{flag})"


def _tokens(arr: JArray, key_parts: tuple[str, ...]) -> list[Hashable]:
    """Projected identity per element, occurrence-numbered to stay unique."""
    seen: Counter = Counter()
    tokens: list[Hashable] = []
    for item in arr.items:
        projected = project_identity(item, key_parts)
        base = ("id", projected) if projected is not None else ("value", canonical_json(item))
        tokens.append((base, seen[base]))
        seen[base] += 1
    return tokens


def _longest_increasing(pairs: list[tuple[int, int]]) -> list[tuple[int, int]]:
    """Longest subsequence of pairs whose second items strictly increase."""
    tail_values: list[int] = []
    tail_index: list[int] = []
    previous = [-1] * len(pairs)

    for idx, (_, j) in enumerate(pairs):
        k = bisect_left(tail_values, j)
        if k == len(tail_values):
            tail_values.append(j)
            tail_index.append(idx)
        else:
            tail_values[k] = j
            tail_index[k] = idx
        previous[idx] = tail_index[k - 1] if k else -1

    run: list[tuple[int, int]] = []
    idx = tail_index[-1] if tail_index else -1
    while idx != -1:
        run.append(pairs[idx])
        idx = previous[idx]
    run.reverse()
    return run


def align_arrays(left: JArray, right: JArray, key_parts: tuple[str, ...]) -> list[AlignOp]:
    """
    Align two arrays by identity.

    Every left element appears in exactly one "removed" or "common" op and
    every right element in exactly one "added" or "common" op.
    """
    left_tokens = _tokens(left, key_parts)
    right_tokens = _tokens(right, key_parts)
    right_position = {tok: j for j, tok in enumerate(right_tokens)}

    matches = [(i, right_position[tok]) for i, tok in enumerate(left_tokens)
               if tok in right_position]
    paired_right = {j for _, j in matches}
    anchors = _longest_increasing(matches)

    def ident(arr: JArray, index: int):
        return identity_parts(arr.items[index], key_parts)

    m, n = len(left_tokens), len(right_tokens)
    ops: list[AlignOp] = []
    li = rj = 0
    for ai, aj in anchors + [(m, n)]:
        for i in range(li, ai):
            partner = right_position.get(left_tokens[i])
            if partner is None:
                ops.append(AlignOp("removed", i, None, ident(left, i)))
            else:
                ops.append(AlignOp("common", i, partner, ident(left, i), moved=True))
        for j in range(rj, aj):
            if j not in paired_right:
                ops.append(AlignOp("added", None, j, ident(right, j)))
        if ai < m:
            ops.append(AlignOp("common", ai, aj, ident(left, ai)))
        li, rj = ai + 1, aj + 1

    return ops
