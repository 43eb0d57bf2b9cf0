"""Argument values sent to a searpc server.

Every RPC argument is one of a closed set of variants: 32-bit integer,
64-bit integer, string, arbitrary JSON, or null. A Value always encodes to
the JSON type implied by its kind.

Interface declarations use ``Int64`` and ``Json`` to ask for the 64-bit and
raw-JSON variants, since plain ``int`` means a 32-bit integer on the wire.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, NewType

from pydantic import BaseModel, PydanticSchemaGenerationError, PydanticUserError, TypeAdapter
from pydantic_core import PydanticSerializationError, to_jsonable_python

from searpc_client.core.errors import GenerationError

Int64 = NewType("Int64", int)
Json = NewType("Json", object)

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_NONE_TYPE = type(None)


class ValueKind(str, Enum):
    """Wire variant of a Value."""

    INT = "int"
    INT64 = "int64"
    STRING = "string"
    JSON = "json"
    NULL = "null"


def _check_integer(value: Any, low: int, high: int, kind: str) -> int:
    # bool is an int subclass but never a wire integer
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{kind} value must be an int, got {type(value).__name__}")
    if not low <= value <= high:
        raise ValueError(f"{kind} value out of range: {value}")
    return value


@dataclass(frozen=True)
class Value:
    """One RPC argument.

    Attributes:
        kind: Which variant is active.
        data: JSON-compatible payload (None for NULL).
    """

    kind: ValueKind
    data: Any = None

    @classmethod
    def integer(cls, value: int) -> Value:
        """32-bit signed integer."""
        return cls(ValueKind.INT, _check_integer(value, INT32_MIN, INT32_MAX, "int"))

    @classmethod
    def int64(cls, value: int) -> Value:
        """64-bit signed integer."""
        return cls(ValueKind.INT64, _check_integer(value, INT64_MIN, INT64_MAX, "int64"))

    @classmethod
    def string(cls, value: str) -> Value:
        if not isinstance(value, str):
            raise TypeError(f"string value must be a str, got {type(value).__name__}")
        return cls(ValueKind.STRING, value)

    @classmethod
    def json(cls, value: Any) -> Value:
        """Arbitrary structured data.

        Pydantic models, dataclasses and other objects pydantic knows how to
        serialize are converted to plain JSON-compatible data.
        """
        try:
            data = to_jsonable_python(value)
        except PydanticSerializationError as e:
            raise TypeError(f"Value is not JSON serializable: {e}") from e
        return cls(ValueKind.JSON, data)

    @classmethod
    def null(cls) -> Value:
        return cls(ValueKind.NULL)

    @classmethod
    def from_python(cls, obj: Any) -> Value:
        """Convert an untyped Python object into a Value.

        Integers pick the 32-bit variant when they fit and the 64-bit variant
        otherwise. Values pass through unchanged.
        """
        if isinstance(obj, Value):
            return obj
        if obj is None:
            return cls.null()
        if isinstance(obj, bool):
            return cls.integer(int(obj))
        if isinstance(obj, int):
            if INT32_MIN <= obj <= INT32_MAX:
                return cls.integer(obj)
            return cls.int64(obj)
        if isinstance(obj, str):
            return cls.string(obj)
        return cls.json(obj)

    def to_json(self) -> Any:
        """Return the JSON-compatible object this value encodes to."""
        return self.data


# === Declared-type introspection ===


def optional_inner(annotation: Any) -> Any | None:
    """Return T for ``Optional[T]`` / ``T | None``, else None."""
    origin = typing.get_origin(annotation)
    if origin is not typing.Union and origin is not types.UnionType:
        return None
    args = [arg for arg in typing.get_args(annotation) if arg is not _NONE_TYPE]
    if len(args) != 1 or len(args) == len(typing.get_args(annotation)):
        return None
    return args[0]


def sequence_inner(annotation: Any) -> Any | None:
    """Return T for ``list[T]`` / ``Sequence[T]``, else None.

    A bare ``list`` yields ``Any``.
    """
    if annotation is list:
        return Any
    origin = typing.get_origin(annotation)
    if origin is list or origin is Sequence:
        args = typing.get_args(annotation)
        return args[0] if args else Any
    return None


def is_mapping_type(annotation: Any) -> bool:
    """True for ``dict`` / ``dict[K, V]`` / ``Mapping[K, V]``."""
    if annotation is dict:
        return True
    origin = typing.get_origin(annotation)
    return origin is dict or origin is Mapping


def is_model_type(annotation: Any) -> bool:
    """True for user-defined structured types: pydantic models, dataclasses, TypedDicts."""
    if not isinstance(annotation, type):
        return False
    if issubclass(annotation, BaseModel):
        return True
    return dataclasses.is_dataclass(annotation) or typing.is_typeddict(annotation)


def is_json_type(annotation: Any) -> bool:
    return annotation is Json or annotation is Any


def _structured_converter(annotation: Any) -> Callable[[Any], Value]:
    try:
        adapter: TypeAdapter[Any] = TypeAdapter(annotation)
    except (PydanticSchemaGenerationError, PydanticUserError) as e:
        raise GenerationError(
            f"Unsupported parameter type: {describe_type(annotation)}: {e}"
        ) from e

    def convert(value: Any) -> Value:
        return Value(ValueKind.JSON, adapter.dump_python(value, mode="json"))

    return convert


def _null_converter(value: Any) -> Value:
    return Value.null()


def _bool_converter(value: Any) -> Value:
    return Value.integer(1 if value else 0)


def converter_for(annotation: Any) -> Callable[[Any], Value]:
    """Resolve the Value conversion for a declared parameter type.

    Resolution happens once, when an interface is compiled. The returned
    function is then applied to each argument at call time.

    Raises:
        GenerationError: If the declared type is not a supported parameter shape.
    """
    if annotation is bool:
        return _bool_converter
    if annotation is Int64:
        return Value.int64
    if annotation is int:
        return Value.integer
    if annotation is str:
        return Value.string
    if annotation is None or annotation is _NONE_TYPE:
        return _null_converter
    if is_json_type(annotation):
        return Value.json

    inner = optional_inner(annotation)
    if inner is not None:
        inner_converter = converter_for(inner)

        def convert_optional(value: Any) -> Value:
            if value is None:
                return Value.null()
            return inner_converter(value)

        return convert_optional

    if (
        is_model_type(annotation)
        or is_mapping_type(annotation)
        or sequence_inner(annotation) is not None
    ):
        return _structured_converter(annotation)

    raise GenerationError(f"Unsupported parameter type: {describe_type(annotation)}")


def describe_type(annotation: Any) -> str:
    """Readable name for a declared type, for error messages."""
    if isinstance(annotation, type) and not typing.get_args(annotation):
        return annotation.__name__
    return repr(annotation).replace("typing.", "")
