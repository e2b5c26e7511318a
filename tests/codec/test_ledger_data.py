"""Tests for untyped ledger data parsing (detailed JSON schema)."""

import json

import pytest

from invoice_kernel.codec.data import (
    Constr,
    DataMap,
    coerce,
    dumps,
    from_json,
    loads,
    to_json,
)
from invoice_kernel.exceptions import DecodeError, MalformedDataError


class TestFromJson:
    def test_int(self):
        assert from_json({"int": 42}) == 42

    def test_big_int(self):
        assert from_json({"int": 2**100}) == 2**100

    def test_bytes(self):
        assert from_json({"bytes": "00ff"}) == b"\x00\xff"

    def test_empty_bytes(self):
        assert from_json({"bytes": ""}) == b""

    def test_constructor(self):
        node = from_json({"constructor": 1, "fields": [{"int": 5}]})
        assert node == Constr(1, (5,))

    def test_list(self):
        assert from_json({"list": [{"int": 1}, {"bytes": "aa"}]}) == [1, b"\xaa"]

    def test_map_preserves_order(self):
        node = from_json(
            {"map": [{"k": {"int": 2}, "v": {"int": 20}}, {"k": {"int": 1}, "v": {"int": 10}}]}
        )
        assert node == DataMap(((2, 20), (1, 10)))


class TestMalformed:
    @pytest.mark.parametrize(
        "obj",
        [
            [],
            "x",
            {"int": "5"},
            {"int": True},
            {"int": 1.5},
            {"bytes": "zz"},
            {"bytes": 5},
            {"constructor": -1, "fields": []},
            {"constructor": 0},
            {"constructor": 0, "fields": {}},
            {"list": {}},
            {"map": [{"k": {"int": 1}}]},
            {"int": 1, "bytes": ""},
            {"string": "abc"},
        ],
    )
    def test_rejected(self, obj):
        with pytest.raises(MalformedDataError):
            from_json(obj)

    def test_error_path_points_at_node(self):
        with pytest.raises(MalformedDataError) as exc_info:
            from_json({"constructor": 0, "fields": [{"int": 1}, {"bytes": "q"}]})
        assert exc_info.value.path == "$.fields[1]"
        assert exc_info.value.code == "MALFORMED_DATA"

    def test_malformed_is_a_decode_error(self):
        with pytest.raises(DecodeError):
            loads("{not json")


class TestToJson:
    def test_renders_detailed_schema(self):
        node = Constr(0, (b"\x01", [7], DataMap(((b"", 3),))))
        assert to_json(node) == {
            "constructor": 0,
            "fields": [
                {"bytes": "01"},
                {"list": [{"int": 7}]},
                {"map": [{"k": {"bytes": ""}, "v": {"int": 3}}]},
            ],
        }

    def test_bool_is_not_data(self):
        with pytest.raises(TypeError):
            to_json(True)

    def test_dumps_is_canonical(self):
        text = dumps(Constr(2))
        assert text == '{"constructor":2,"fields":[]}'
        assert loads(text) == Constr(2)


class TestCoerce:
    def test_json_text(self):
        assert coerce(json.dumps({"int": 3})) == 3

    def test_parsed_json(self):
        assert coerce({"bytes": "ab"}) == b"\xab"

    def test_data_node_passthrough(self):
        node = Constr(3)
        assert coerce(node) is node

    def test_bytes_are_data_not_text(self):
        assert coerce(b"{}") == b"{}"


def _nested_list(depth: int) -> dict:
    node: dict = {"int": 1}
    for _ in range(depth):
        node = {"list": [node]}
    return node


class TestNestingDepth:
    """Pathologically deep payloads fail as decode errors, not RecursionError."""

    @pytest.mark.parametrize("depth", [2000, 5000])
    def test_deep_json_text(self, depth):
        text = '{"list":[' * depth + '{"int":1}' + "]}" * depth
        with pytest.raises(MalformedDataError) as exc_info:
            loads(text)
        assert exc_info.value.reason == "nesting too deep"
        assert exc_info.value.path == "$"

    def test_deep_parsed_json(self):
        with pytest.raises(MalformedDataError) as exc_info:
            from_json(_nested_list(5000))
        assert exc_info.value.reason == "nesting too deep"

    def test_deep_payload_through_coerce(self):
        with pytest.raises(DecodeError):
            coerce(_nested_list(5000))

    def test_moderate_nesting_still_parses(self):
        node = from_json(_nested_list(50))
        for _ in range(50):
            node = node[0]
        assert node == 1
