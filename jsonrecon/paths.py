r"""
jsonrecon.paths — Display paths, numeric paths and array patterns.

Every diff entry carries two addresses for the same node:

    display path   root.users[id=7].tags[0]      identity-aware, for people
    numeric path   root.users[2].tags[0]         positional, one node each

Grammar (both encodings):

    path     := root segment*
    segment  := "." name                  object property
              | "[" digits "]"            array position
              | "[" key "=" value ("," key "=" value)* "]"
                                          array element by identity
              | "[]"                      any element (array patterns only)

A numeric path never contains identity segments.  A *viewer path* is a
numeric path prefixed with the side it addresses ("left_" / "right_"); this
module only adds and strips that prefix.  An *array pattern* is a
root-relative path in which every array segment is "[]":

    users[].tags[]

A backslash escapes the next character.  Property names escape \, . [ and ];
identity keys and values escape \, [ ] , and =:

    {"a.b": 1}                   root.a\.b
    [{"name": "x,y=z"}, ...]     root[name=x\,y\=z]

so every rendered path tokenizes back to the same segments.
"""

from dataclasses import dataclass
from typing import Optional, Union

from .errors import PathSyntaxError

SIDES = ("left", "right")

_NAME_SPECIALS = "\\.[]"
_IDENTITY_SPECIALS = "\\[],="


def escape(text: str, specials: str) -> str:
    """Backslash every character of ``text`` that is in ``specials``."""
    return "".join("\\" + c if c in specials else c for c in text)


# ═══════════════════════════════════════════════════════════════════
#  SEGMENTS
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class Field:
    """Object property segment: ``.name``."""
    name: str


@dataclass(frozen=True, slots=True)
class Index:
    """Positional array segment: ``[n]``."""
    position: int


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Identity array segment: ``[id=7]`` or ``[type=A,subtype=x]``.

    ``parts`` pairs every key property with the text of its value, in key
    order.  The text is unescaped; ``label`` is the escaped form written
    between the brackets.
    """
    parts: tuple[tuple[str, str], ...]

    @property
    def key(self) -> str:
        """Key name as recorded in IdentityKeyInfo (``k`` or ``k1+k2``)."""
        return "+".join(k for k, _ in self.parts)

    @property
    def key_parts(self) -> tuple[str, ...]:
        return tuple(k for k, _ in self.parts)

    @property
    def values(self) -> tuple[str, ...]:
        return tuple(v for _, v in self.parts)

    @property
    def label(self) -> str:
        return ",".join(
            f"{escape(k, _IDENTITY_SPECIALS)}={escape(v, _IDENTITY_SPECIALS)}"
            for k, v in self.parts
        )


@dataclass(frozen=True, slots=True)
class Wildcard:
    """Pattern segment: ``[]``, any element of the array."""


Segment = Union[Field, Index, Identity, Wildcard]


def render_segment(segment: Segment) -> str:
    if isinstance(segment, Field):
        return "." + escape(segment.name, _NAME_SPECIALS)
    if isinstance(segment, Index):
        return f"[{segment.position}]"
    if isinstance(segment, Identity):
        return f"[{segment.label}]"
    if isinstance(segment, Wildcard):
        return "[]"
    raise TypeError(f"Unknown path segment: {segment!r}")


def render_path(segments: list[Segment], root: Optional[str] = "root") -> str:
    """
    Render segments back into a path string.

    With ``root=None`` the path is root-relative (array patterns): a
    leading property carries no dot.
    """
    text = root or ""
    for segment in segments:
        piece = render_segment(segment)
        if not text and isinstance(segment, Field):
            piece = piece[1:]
        text += piece
    return text


# ═══════════════════════════════════════════════════════════════════
#  INCREMENTAL BUILDERS  (used while the comparator descends)
# ═══════════════════════════════════════════════════════════════════

def field_path(path: str, name: str) -> str:
    return path + render_segment(Field(name))


def index_path(path: str, position: int) -> str:
    return f"{path}[{position}]"


def identity_path(path: str, parts: tuple[tuple[str, str], ...]) -> str:
    return path + render_segment(Identity(parts))


# ═══════════════════════════════════════════════════════════════════
#  TOKENIZER
# ═══════════════════════════════════════════════════════════════════

def parse_path(path: str, *, root: str = "root", side: Optional[str] = None,
               allow_wildcards: bool = False) -> list[Segment]:
    """
    Split a path into segments.

    The leading root name is optional: ``root.a[0]`` and ``a[0]`` parse to
    the same segments.  Escapes are resolved, so segment names and values
    hold the original text.  Raises PathSyntaxError (carrying ``path`` and
    ``side``) when the text does not follow the grammar.
    """
    if not isinstance(path, str):
        raise PathSyntaxError(repr(path), "path must be a string", side=side)

    text = path
    offset = 0
    if text == root:
        return []
    if text.startswith(root) and text[len(root):len(root) + 1] in (".", "["):
        offset = len(root)

    segments: list[Segment] = []
    i = offset
    n = len(text)
    while i < n:
        c = text[i]
        if c == "." or (i == offset == 0 and c not in "[]"):
            start = i + 1 if c == "." else i
            name: list[str] = []
            j = start
            while j < n and text[j] not in ".[]":
                if text[j] == "\\":
                    if j + 1 == n:
                        raise PathSyntaxError(path, "dangling '\\'", side=side, position=j)
                    j += 1
                name.append(text[j])
                j += 1
            if j == start:
                raise PathSyntaxError(path, "empty property name", side=side, position=i)
            segments.append(Field("".join(name)))
            i = j
        elif c == "[":
            close = _closing_bracket(text, i + 1)
            if close == -1:
                raise PathSyntaxError(path, "unclosed '['", side=side, position=i)
            segments.append(
                _parse_bracket(text[i + 1:close], path, side, i, allow_wildcards)
            )
            i = close + 1
        elif c == "]":
            raise PathSyntaxError(path, "unexpected ']'", side=side, position=i)
        else:
            raise PathSyntaxError(path, "expected '.' or '['", side=side, position=i)
    return segments


def _closing_bracket(text: str, start: int) -> int:
    i = start
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == "]":
            return i
        i += 1
    return -1


def _split_unescaped(text: str, sep: str, maxsplit: int = -1) -> list[str]:
    """Split on ``sep`` where it is not escaped; pieces keep their escapes."""
    pieces: list[str] = []
    current: list[str] = []
    i = 0
    while i < len(text):
        c = text[i]
        if c == "\\":
            current.append(text[i:i + 2])
            i += 2
            continue
        if c == sep and maxsplit != len(pieces):
            pieces.append("".join(current))
            current = []
        else:
            current.append(c)
        i += 1
    pieces.append("".join(current))
    return pieces


def _unescape(text: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(text):
        if text[i] == "\\":
            i += 1
        out.append(text[i])
        i += 1
    return "".join(out)


def _parse_bracket(inner: str, path: str, side: Optional[str], position: int,
                   allow_wildcards: bool) -> Segment:
    if inner == "":
        if not allow_wildcards:
            raise PathSyntaxError(path, "'[]' is only valid in array patterns",
                                  side=side, position=position)
        return Wildcard()
    if inner.isascii() and inner.isdigit():
        return Index(int(inner))

    parts: list[tuple[str, str]] = []
    for piece in _split_unescaped(inner, ","):
        pair = _split_unescaped(piece, "=", maxsplit=1)
        if len(pair) != 2 or len(_split_unescaped(piece, "[")) > 1:
            raise PathSyntaxError(path, f"bad array segment [{inner}]",
                                  side=side, position=position)
        key, value = pair
        if not key:
            raise PathSyntaxError(path, f"empty identity key in [{inner}]",
                                  side=side, position=position)
        parts.append((_unescape(key), _unescape(value)))
    return Identity(tuple(parts))


def has_identity_segments(path: str, *, root: str = "root") -> bool:
    """True when ``path`` tokenizes and names at least one element by identity."""
    try:
        segments = parse_path(path, root=root, allow_wildcards=True)
    except PathSyntaxError:
        return False
    return any(isinstance(s, Identity) for s in segments)


def to_array_pattern(path: str, *, root: str = "root") -> str:
    """
    Replace every array segment with ``[]`` and drop the root:

        root.users[id=7].tags[0]  →  users[].tags[]
    """
    segments = parse_path(path, root=root, allow_wildcards=True)
    generic = [s if isinstance(s, Field) else Wildcard() for s in segments]
    return render_path(generic, root=None)


# ═══════════════════════════════════════════════════════════════════
#  VIEWER PATHS
# ═══════════════════════════════════════════════════════════════════

def _check_side(side: str, path: str) -> None:
    if side not in SIDES:
        raise PathSyntaxError(path, f"side must be 'left' or 'right', got {side!r}",
                              side=side)


def to_viewer_path(numeric_path: str, side: str) -> str:
    """Prefix a numeric path with its side: ``left_root.a[0]``."""
    _check_side(side, numeric_path)
    return f"{side}_{numeric_path}"


def split_viewer_path(viewer_path: str) -> tuple[str, str]:
    """Inverse of to_viewer_path: ``(side, numeric_path)``."""
    side, sep, rest = viewer_path.partition("_")
    if not sep or side not in SIDES or not rest:
        raise PathSyntaxError(viewer_path, "missing 'left_' or 'right_' prefix")
    return side, rest


def is_viewer_path(path: str) -> bool:
    return path.startswith(tuple(f"{s}_" for s in SIDES))
