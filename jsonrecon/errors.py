"""
jsonrecon.errors — Error hierarchy.

All jsonrecon-specific errors inherit from JsonReconError for easy catching.
The comparator itself never raises on well-formed values; these errors come
from configuration loading and from malformed paths handed to the resolver.
"""

from typing import Optional


class JsonReconError(Exception):
    """Base error for all jsonrecon operations."""


class ConfigError(JsonReconError):
    """Invalid or unreadable configuration."""


class PathSyntaxError(JsonReconError):
    """
    A path string that cannot be tokenized.

    Carries the offending path, the side it was resolved against (if any)
    and the character offset where tokenizing stopped.
    """

    def __init__(self, path: str, reason: str, *,
                 side: Optional[str] = None, position: Optional[int] = None):
        self.path = path
        self.reason = reason
        self.side = side
        self.position = position
        where = f" at offset {position}" if position is not None else ""
        on = f" (side={side})" if side is not None else ""
        super().__init__(f"Malformed path {path!r}{on}: {reason}{where}")
