"""Call-kinds and decoding of the ``ret`` field.

Each server function belongs to one return-shape family. The call-kind
decides how ``ret`` is validated and what Python value the caller gets.
"""

from collections.abc import Callable
from enum import Enum
from typing import Any

from searpc_client.core.errors import ResultTypeError
from searpc_client.core.values import INT32_MAX, INT32_MIN, INT64_MAX, INT64_MIN


class CallKind(str, Enum):
    """Return-shape family of a server function."""

    INT = "int"
    INT64 = "int64"
    STRING = "string"
    OBJECT = "object"
    OBJLIST = "objlist"
    JSON = "json"


def json_shape(value: Any) -> str:
    """Name the JSON type of a decoded value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _integer(ret: Any, low: int, high: int, expected: str) -> int:
    if isinstance(ret, bool) or not isinstance(ret, int):
        actual = json_shape(ret)
        if isinstance(ret, float):
            actual = f"non-integer number {ret!r}"
        raise ResultTypeError(expected, actual)
    if not low <= ret <= high:
        raise ResultTypeError(expected, f"number {ret} out of range")
    return ret


def _decode_int(ret: Any) -> int:
    return _integer(ret, INT32_MIN, INT32_MAX, "int")


def _decode_int64(ret: Any) -> int:
    return _integer(ret, INT64_MIN, INT64_MAX, "int64")


def _decode_string(ret: Any) -> str:
    if not isinstance(ret, str):
        raise ResultTypeError("string", json_shape(ret))
    return ret


def _decode_object(ret: Any) -> dict[str, Any] | None:
    # null is the server's "no such object"
    if ret is not None and not isinstance(ret, dict):
        raise ResultTypeError("object", json_shape(ret))
    return ret


def _decode_objlist(ret: Any) -> list[Any]:
    # The server sends null for an empty result list
    if ret is None:
        return []
    if not isinstance(ret, list):
        raise ResultTypeError("array", json_shape(ret))
    return ret


def _decode_json(ret: Any) -> Any:
    return ret


_DECODERS: dict[CallKind, Callable[[Any], Any]] = {
    CallKind.INT: _decode_int,
    CallKind.INT64: _decode_int64,
    CallKind.STRING: _decode_string,
    CallKind.OBJECT: _decode_object,
    CallKind.OBJLIST: _decode_objlist,
    CallKind.JSON: _decode_json,
}


def decode_result(kind: CallKind, ret: Any, nullable: bool = False) -> Any:
    """Validate and decode ``ret`` for a call-kind.

    Args:
        kind: Call-kind of the function that produced ``ret``.
        ret: The ``ret`` field of a successful response.
        nullable: Let a null ``ret`` through as None for scalar kinds.

    Returns:
        int for INT/INT64, str for STRING, dict or None for OBJECT,
        list for OBJLIST, any JSON value for JSON.

    Raises:
        ResultTypeError: If ``ret`` does not have the expected shape.
    """
    if nullable and ret is None:
        return None
    return _DECODERS[kind](ret)
