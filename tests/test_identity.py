"""
Tests for jsonrecon.identity — identity key discovery.
"""

import sys
import os
import logging
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from jsonrecon.config import DiffConfig
from jsonrecon.formats import from_python
from jsonrecon.identity import (
    find_identity_key, identity_parts, join_key, looks_categorical,
    looks_volatile, project_identity, rank_candidate_keys, split_key,
)


def key_of(left, right, config=None):
    if config is None:
        return find_identity_key(from_python(left), from_python(right))
    return find_identity_key(from_python(left), from_python(right), config)


# ═══════════════════════════════════════════════════════════════════
#  §1  WHEN TO TRY
# ═══════════════════════════════════════════════════════════════════

class TestEligibility:

    @pytest.mark.parametrize("left,right", [
        ([], []),
        ([], [{"id": 1}]),
        ([{"id": 1}], []),
    ])
    def test_too_small(self, left, right):
        assert key_of(left, right) is None

    def test_one_against_one(self):
        assert key_of([{"id": 1}], [{"id": 1}]) == "id"

    def test_scalars_only(self):
        assert key_of([1, 2, 3], [1, 2]) is None

    def test_proportion_at_threshold(self):
        left = [{"id": 1}, {"id": 2}, {"id": 3}, {"id": 4}, "x"]
        assert key_of(left, [{"id": 1}]) == "id"

    def test_proportion_below_threshold(self):
        left = [{"id": 1}, {"id": 2}, {"id": 3}, "x"]
        assert key_of(left, [{"id": 1}, {"id": 2}]) is None

    def test_proportion_is_configurable(self):
        left = [{"id": 1}, {"id": 2}, {"id": 3}, "x"]
        config = DiffConfig(min_object_proportion=0.5)
        assert key_of(left, [{"id": 1}, {"id": 2}], config) == "id"

    def test_empty_side_does_not_block(self):
        assert key_of([{"id": 1}, {"id": 2}], []) == "id"


# ═══════════════════════════════════════════════════════════════════
#  §2  CANDIDATE RANKING
# ═══════════════════════════════════════════════════════════════════

class TestRanking:

    def test_full_order(self):
        names = ["zeta", "name", "accountType", "subtype", "id", "alpha"]
        assert rank_candidate_keys(names) == [
            "id", "name", "accountType", "alpha", "subtype", "zeta",
        ]

    def test_preferred_case_insensitive(self):
        assert rank_candidate_keys(["code", "ID"]) == ["ID", "code"]

    def test_extra_preferred_keys(self):
        config = DiffConfig(extra_preferred_keys=("sku",))
        assert rank_candidate_keys(["alpha", "sku", "id"], config) == ["id", "sku", "alpha"]

    def test_preferred_wins_when_both_qualify(self):
        left = [{"name": "a", "id": 1}, {"name": "b", "id": 2}]
        assert key_of(left, left) == "id"

    def test_categorical_before_generated_id(self):
        left = [
            {"entityId": "e1", "accountType": "401k"},
            {"entityId": "e2", "accountType": "ira"},
        ]
        right = [
            {"entityId": "e2", "accountType": "401k"},
            {"entityId": "e1", "accountType": "ira"},
        ]
        assert key_of(left, right) == "accountType"

    @pytest.mark.parametrize("name,expected", [
        ("type", True),
        ("Type", True),
        ("accountType", True),
        ("asset_kind", True),
        ("product-category", True),
        ("subtype", False),
        ("kindness", False),
        ("prototype", False),
        ("id", False),
    ])
    def test_looks_categorical(self, name, expected):
        assert looks_categorical(name, ("type", "kind", "category")) is expected

    @pytest.mark.parametrize("name,expected", [
        ("entityId", True),
        ("row_uuid", True),
        ("recordID", True),
        ("id", False),
        ("valid", False),
        ("accountType", False),
    ])
    def test_looks_volatile(self, name, expected):
        assert looks_volatile(name) is expected

    def test_volatile_names_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="jsonrecon.identity"):
            rank_candidate_keys(["entityId", "value"])
        assert "entityId" in caplog.text


# ═══════════════════════════════════════════════════════════════════
#  §3  VALIDATION
# ═══════════════════════════════════════════════════════════════════

class TestValidation:

    def test_duplicates_rejected(self):
        assert key_of([{"id": 1}, {"id": 1}], [{"id": 1}, {"id": 2}]) is None

    def test_single_element_needs_no_uniqueness(self):
        assert key_of([{"id": 1}], [{"id": 1}, {"id": 2}]) == "id"

    def test_no_overlap_rejected(self):
        assert key_of([{"id": 1}, {"id": 2}], [{"id": 3}, {"id": 4}]) is None

    def test_missing_on_right_rejected(self):
        assert key_of([{"id": 1}, {"id": 2}], [{"id": 1}, {"v": 2}]) is None

    @pytest.mark.parametrize("bad", [True, None, [1], {"x": 1}])
    def test_non_scalar_key_values_rejected(self, bad):
        left = [{"id": bad, "n": 1}, {"id": 2, "n": 2}]
        # "n" still qualifies once "id" is rejected
        assert key_of(left, left) == "n"

    def test_falls_through_to_next_candidate(self):
        left = [{"id": 1, "code": "a"}, {"id": 1, "code": "b"}]
        right = [{"id": 2, "code": "b"}, {"id": 3, "code": "a"}]
        assert key_of(left, right) == "code"

    def test_number_and_string_values(self):
        left = [{"id": "a"}, {"id": 2}]
        assert key_of(left, [{"id": 2.0}, {"id": "b"}]) == "id"

    def test_uses_left_sample_first(self):
        left = [{"code": "a"}, {"code": "b"}]
        right = [{"code": "a", "id": 1}, {"code": "b", "id": 2}]
        # "id" is not on the left sample, and not on every left object
        assert key_of(left, right) == "code"


# ═══════════════════════════════════════════════════════════════════
#  §4  COMPOSITE KEYS
# ═══════════════════════════════════════════════════════════════════

PAIR_DATA = [
    {"type": "A", "subtype": "x"},
    {"type": "A", "subtype": "y"},
    {"type": "B", "subtype": "x"},
]

TRIPLE_DATA = [
    {"a": 0, "b": 0, "c": 0},
    {"a": 0, "b": 0, "c": 1},
    {"a": 0, "b": 1, "c": 0},
    {"a": 1, "b": 0, "c": 0},
]


class TestComposite:

    def test_pair(self):
        assert key_of(PAIR_DATA, PAIR_DATA[::-1]) == "type+subtype"

    def test_pairs_disabled(self):
        assert key_of(PAIR_DATA, PAIR_DATA, DiffConfig(max_composite_size=1)) is None

    def test_triple_needs_config(self):
        assert key_of(TRIPLE_DATA, TRIPLE_DATA[::-1]) is None
        config = DiffConfig(max_composite_size=3)
        assert key_of(TRIPLE_DATA, TRIPLE_DATA[::-1], config) == "a+b+c"

    def test_split_and_join(self):
        assert split_key("type+subtype") == ("type", "subtype")
        assert split_key("id") == ("id",)
        assert join_key(("a", "b", "c")) == "a+b+c"


# ═══════════════════════════════════════════════════════════════════
#  §5  PROJECTION
# ═══════════════════════════════════════════════════════════════════

class TestProjection:

    def test_project(self):
        item = from_python({"type": "A", "n": 1.0, "flag": True})
        assert project_identity(item, ("type", "n")) == ("A", "1")
        assert project_identity(item, ("flag",)) is None
        assert project_identity(item, ("missing",)) is None
        assert project_identity(from_python("A"), ("type",)) is None

    def test_identity_parts(self):
        item = from_python({"type": "A", "subtype": "x"})
        assert identity_parts(item, ("type", "subtype")) == (("type", "A"), ("subtype", "x"))
        assert identity_parts(from_python(3), ("id",)) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
