"""
Tests for jsonrecon.values and jsonrecon.formats.
"""

import sys
import os
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from jsonrecon.formats import canonical_json, from_json, from_python, to_json, to_python
from jsonrecon.values import (
    JArray, JBool, JNull, JNumber, JObject, JString, Kind, scalar_text,
)


class TestValues:

    def test_kinds(self):
        assert JNull().kind is Kind.NULL
        assert JBool(True).kind is Kind.BOOL
        assert JNumber(1).kind is Kind.NUMBER
        assert JString("a").kind is Kind.STRING
        assert JObject({}).kind is Kind.OBJECT
        assert JArray(()).kind is Kind.ARRAY
        assert JString("a").is_scalar()
        assert not JArray(()).is_scalar()

    def test_no_coercion(self):
        assert JBool(True) != JNumber(1)
        assert JBool(False) != JNumber(0)
        assert JNull() != JNumber(0)
        assert JString("1") != JNumber(1)

    def test_number_equality(self):
        assert JNumber(1) == JNumber(1.0)
        assert hash(JNumber(1)) == hash(JNumber(1.0))
        assert JNumber(float("nan")) == JNumber(float("nan"))
        assert hash(JNumber(float("nan"))) == hash(JNumber(float("nan")))
        assert JNumber(1) != JNumber(2)

    def test_object_equality_ignores_order(self):
        a = JObject({"x": JNumber(1), "y": JNumber(2)})
        b = JObject({"y": JNumber(2), "x": JNumber(1)})
        assert a == b
        assert hash(a) == hash(b)

    def test_object_copies_entries(self):
        entries = {"x": JNumber(1)}
        obj = JObject(entries)
        entries["y"] = JNumber(2)
        assert "y" not in obj
        assert len(obj) == 1

    def test_immutable(self):
        with pytest.raises(AttributeError):
            JString("a").val = "b"

    def test_array_access(self):
        arr = JArray((JNumber(1), JNumber(2)))
        assert len(arr) == 2
        assert arr[1] == JNumber(2)
        assert list(arr) == [JNumber(1), JNumber(2)]

    @pytest.mark.parametrize("value,text", [
        (JString("a"), "a"),
        (JNumber(3), "3"),
        (JNumber(3.0), "3"),
        (JNumber(2.5), "2.5"),
        (JBool(True), "true"),
        (JNull(), "null"),
    ])
    def test_scalar_text(self, value, text):
        assert scalar_text(value) == text

    def test_scalar_text_rejects_containers(self):
        with pytest.raises(TypeError):
            scalar_text(JArray(()))


class TestFormats:

    def test_from_python(self):
        val = from_python({"a": [1, True, None, "s", 2.5]})
        assert val == JObject({"a": JArray((
            JNumber(1), JBool(True), JNull(), JString("s"), JNumber(2.5),
        ))})

    def test_bool_is_not_number(self):
        assert isinstance(from_python(True), JBool)
        assert isinstance(from_python(0), JNumber)

    def test_keys_stringified(self):
        assert from_python({1: "a"}) == JObject({"1": JString("a")})

    def test_tuple_is_array(self):
        assert from_python((1, 2)) == from_python([1, 2])

    def test_jvalue_passthrough(self):
        inner = JString("x")
        assert from_python({"a": inner}).get("a") is inner

    def test_rejects_non_json(self):
        with pytest.raises(TypeError):
            from_python({"a": {1, 2}})

    @pytest.mark.parametrize("obj", [
        None, True, 0, -3.5, "", "héllo",
        [], {}, [1, [2, [3]]], {"a": {"b": [None, False]}},
    ])
    def test_python_round_trip(self, obj):
        assert to_python(from_python(obj)) == obj

    def test_json_text(self):
        val = from_json('{"b": [1, 2], "a": null}')
        assert val == from_python({"a": None, "b": [1, 2]})
        assert from_json(to_json(val)) == val
        assert to_json(from_python({"a": 1}), sort_keys=True) == '{"a": 1}'

    def test_canonical_json(self):
        a = from_python({"b": 1.0, "a": ["é"]})
        b = from_python({"a": ["é"], "b": 1})
        assert canonical_json(a) == canonical_json(b) == '{"a":["é"],"b":1}'


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
