"""
jsonrecon
=========

Structural diff of JSON trees that survives array reordering.

    compare([{"id": 1, "name": "a"}], [{"id": 1, "name": "b"}])
        → CHANGED at root[id=1].name: JString('a') → JString('b')

    compare([{"id": 1}, {"id": 2}], [{"id": 2}, {"id": 3}])
        → REMOVED at root[id=1], ADDED at root[id=3]

For every array it tries to find an identity key (a property, or pair of
properties, that names the elements on both sides) and matches elements by
identity instead of by index.  Each difference carries two addresses:

    display path   root.users[id=7].name    identity-aware
    numeric path   root.users[2].name       positional, one node each

and the resolver maps display paths and array patterns back to concrete
positions in either tree, independently per side.
"""

from jsonrecon.align import AlignOp, align_arrays
from jsonrecon.config import DEFAULT_CONFIG, DiffConfig, load_config
from jsonrecon.core import (
    CompareResult,
    DiffEntry,
    DiffKind,
    IdentityKeyInfo,
    compare,
    detect_identity_keys,
)
from jsonrecon.errors import ConfigError, JsonReconError, PathSyntaxError
from jsonrecon.formats import from_json, from_python, to_json, to_python
from jsonrecon.identity import find_identity_key, rank_candidate_keys
from jsonrecon.paths import (
    parse_path, render_path, split_viewer_path, to_array_pattern, to_viewer_path,
)
from jsonrecon.resolve import (
    PathPair,
    PatternMatch,
    Trees,
    id_based_path_to_viewer_path,
    numeric_to_display_path,
    resolve_array_pattern_to_matching_elements,
    resolve_display_path,
)
from jsonrecon.values import (
    JArray, JBool, JNull, JNumber, JObject, JString, JValue, Kind,
)

__version__ = "0.1.0"
__all__ = [
    "JValue", "JNull", "JBool", "JNumber", "JString", "JObject", "JArray", "Kind",
    "from_python", "to_python", "from_json", "to_json",
    "compare", "detect_identity_keys",
    "CompareResult", "DiffEntry", "DiffKind", "IdentityKeyInfo",
    "find_identity_key", "rank_candidate_keys",
    "AlignOp", "align_arrays",
    "parse_path", "render_path", "to_array_pattern",
    "to_viewer_path", "split_viewer_path",
    "Trees", "PatternMatch", "PathPair",
    "resolve_array_pattern_to_matching_elements",
    "id_based_path_to_viewer_path",
    "resolve_display_path", "numeric_to_display_path",
    "DiffConfig", "DEFAULT_CONFIG", "load_config",
    "JsonReconError", "ConfigError", "PathSyntaxError",
]
