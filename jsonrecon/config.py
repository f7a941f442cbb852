"""
jsonrecon.config — Comparison settings.

DiffConfig is frozen after creation.  Every public entry point takes an
optional config and falls back to DEFAULT_CONFIG.

A config can also be read from a TOML file:

    [jsonrecon]
    extra_preferred_keys = ["accountId", "sku"]
    max_composite_size = 3
"""

import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

from .errors import ConfigError


@dataclass(frozen=True, slots=True)
class DiffConfig:
    """
    Settings for identity discovery and path rendering.

    Attributes:
        root_name: Leading segment of every display and numeric path.
        preferred_keys: Property names tried first as identity keys, in order.
            Matched case-insensitively.
        extra_preferred_keys: Domain aliases appended after preferred_keys.
        stable_key_words: Words marking a categorical field (``type``,
            ``accountType``, ``asset_kind``).  Such fields rank ahead of every
            other non-preferred field, so ahead of volatile identifiers like
            ``entityId`` that regenerate between snapshots.
        min_object_proportion: Minimum share of object elements an array
            needs before identity matching is attempted.
        max_composite_size: Largest number of properties combined into a
            composite key (2 = pairs, 3 = pairs then triples).
    """

    root_name: str = "root"
    preferred_keys: tuple[str, ...] = ("id", "key", "uuid", "name", "_id")
    extra_preferred_keys: tuple[str, ...] = ()
    stable_key_words: tuple[str, ...] = ("type", "kind", "category")
    min_object_proportion: float = 0.8
    max_composite_size: int = 2

    def __post_init__(self) -> None:
        # TOML arrays arrive as lists
        for name in ("preferred_keys", "extra_preferred_keys", "stable_key_words"):
            value = getattr(self, name)
            if isinstance(value, str) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"{name} must be a sequence of strings, got {value!r}")
            object.__setattr__(self, name, tuple(value))

        if not self.root_name or any(c in self.root_name for c in ".[]"):
            raise ConfigError(f"root_name must be a plain name, got {self.root_name!r}")
        if not 0.0 <= self.min_object_proportion <= 1.0:
            raise ConfigError(
                f"min_object_proportion must be in [0, 1], got {self.min_object_proportion}"
            )
        if self.max_composite_size not in (1, 2, 3):
            raise ConfigError(
                f"max_composite_size must be 1, 2 or 3, got {self.max_composite_size}"
            )

    @property
    def key_preference(self) -> tuple[str, ...]:
        """Lower-cased preferred names, configured aliases last."""
        seen: list[str] = []
        for name in self.preferred_keys + self.extra_preferred_keys:
            lowered = name.lower()
            if lowered not in seen:
                seen.append(lowered)
        return tuple(seen)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DiffConfig":
        """Build a config from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**dict(data))


DEFAULT_CONFIG = DiffConfig()


def load_config(path: Path, **overrides: Any) -> DiffConfig:
    """
    Load a DiffConfig from the ``[jsonrecon]`` table of a TOML file.

    Keyword overrides take precedence over the file.  A file without the
    table yields the defaults (plus overrides).
    """
    try:
        data = tomllib.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    section = data.get("jsonrecon", {})
    if not isinstance(section, dict):
        raise ConfigError(f"[jsonrecon] in {path} must be a table")
    return DiffConfig.from_mapping({**section, **overrides})
