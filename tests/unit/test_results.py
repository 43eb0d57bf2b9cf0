"""Unit tests for call-kinds and ret decoding."""

import pytest

from searpc_client.core.errors import ResultTypeError
from searpc_client.rpc.results import CallKind, decode_result, json_shape


class TestCallKind:
    def test_values(self):
        assert {kind.value for kind in CallKind} == {
            "int",
            "int64",
            "string",
            "object",
            "objlist",
            "json",
        }


class TestJsonShape:
    @pytest.mark.parametrize(
        ("value", "shape"),
        [
            (None, "null"),
            (True, "boolean"),
            (1, "number"),
            (1.5, "number"),
            ("s", "string"),
            ([], "array"),
            ({}, "object"),
        ],
    )
    def test_shapes(self, value, shape):
        assert json_shape(value) == shape


class TestDecodeResult:
    """Tests for decode_result per call-kind."""

    def test_int(self):
        assert decode_result(CallKind.INT, 12) == 12

    def test_int_rejects_string(self):
        with pytest.raises(ResultTypeError) as exc_info:
            decode_result(CallKind.INT, "12")
        assert exc_info.value.expected == "int"
        assert exc_info.value.actual == "string"

    def test_int_rejects_float(self):
        with pytest.raises(ResultTypeError, match="non-integer"):
            decode_result(CallKind.INT, 1.5)

    def test_int_rejects_bool(self):
        with pytest.raises(ResultTypeError):
            decode_result(CallKind.INT, True)

    def test_int_range(self):
        with pytest.raises(ResultTypeError, match="out of range"):
            decode_result(CallKind.INT, 2**31)

    def test_int64_accepts_large(self):
        assert decode_result(CallKind.INT64, 2**40) == 2**40

    def test_string(self):
        assert decode_result(CallKind.STRING, "7.0.5") == "7.0.5"

    def test_string_rejects_null(self):
        with pytest.raises(ResultTypeError, match="got null"):
            decode_result(CallKind.STRING, None)

    def test_nullable_scalar(self):
        assert decode_result(CallKind.STRING, None, nullable=True) is None
        assert decode_result(CallKind.INT, None, nullable=True) is None

    def test_object(self):
        assert decode_result(CallKind.OBJECT, {"id": "r1"}) == {"id": "r1"}

    def test_object_null(self):
        assert decode_result(CallKind.OBJECT, None) is None

    def test_object_rejects_array(self):
        with pytest.raises(ResultTypeError, match="Expected object, got array"):
            decode_result(CallKind.OBJECT, [])

    def test_objlist(self):
        assert decode_result(CallKind.OBJLIST, [{"a": 1}]) == [{"a": 1}]

    def test_objlist_null_is_empty(self):
        assert decode_result(CallKind.OBJLIST, None) == []

    def test_objlist_rejects_object(self):
        with pytest.raises(ResultTypeError):
            decode_result(CallKind.OBJLIST, {"a": 1})

    @pytest.mark.parametrize("ret", [None, 1, "s", [1], {"k": "v"}, True])
    def test_json_passes_anything(self, ret):
        assert decode_result(CallKind.JSON, ret) == ret
