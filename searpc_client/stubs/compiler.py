"""Compile interface descriptions into call plans.

Each method's plan is fixed when the interface is compiled:

- the wire function name (override, or prefix + "_" + name),
- one Value converter per parameter,
- the call-kind and the post-processing of ``ret``, chosen from the
  structure of the declared return type.

Return-type patterns, first match wins:

    bool                       -> INT, then ret != 0
    Optional[T]                -> plan of T, null -> None (OBJECT for
                                  structured T, nullable scalar kind else)
    list[T] / Sequence[T]      -> OBJLIST, decode each element into T
    model / dataclass / TypedDict -> OBJECT, decode into the type
    dict / Mapping             -> OBJECT, validated as a mapping
    str / int / Int64          -> STRING / INT / INT64
    Json / Any                 -> JSON, ret as-is

Anything else fails compilation with GenerationError, so a bad declaration
is reported when the interface is defined, not when it is called.
"""

import dataclasses
import inspect
import typing
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import (
    BaseModel,
    PydanticSchemaGenerationError,
    PydanticUserError,
    TypeAdapter,
    ValidationError,
)

from searpc_client.core.errors import GenerationError, ResultTypeError
from searpc_client.core.values import (
    Int64,
    Value,
    converter_for,
    describe_type,
    is_json_type,
    is_mapping_type,
    is_model_type,
    optional_inner,
    sequence_inner,
)
from searpc_client.rpc.results import CallKind, json_shape
from searpc_client.stubs.description import InterfaceDescription, MethodDescription

Decoder = Callable[[Any], Any]
Converter = Callable[[Any], Value]

_SCALAR_KINDS: dict[Any, CallKind] = {
    str: CallKind.STRING,
    int: CallKind.INT,
    Int64: CallKind.INT64,
}


def _identity(value: Any) -> Any:
    return value


def _to_bool(value: int) -> bool:
    return value != 0


@dataclass(frozen=True)
class ReturnPlan:
    """How a method's result is fetched and post-processed.

    Attributes:
        kind: Call-kind used for the round trip.
        nullable: Whether a null ``ret`` is passed through as None.
        decode: Post-processing applied to the decoded ``ret``.
    """

    kind: CallKind
    decode: Decoder = _identity
    nullable: bool = False


def _adapter_decoder(annotation: Any) -> Decoder:
    """Decode JSON data into ``annotation`` with a pydantic TypeAdapter."""
    try:
        adapter: TypeAdapter[Any] = TypeAdapter(annotation)
    except (PydanticSchemaGenerationError, PydanticUserError) as e:
        raise GenerationError(f"Cannot decode into {describe_type(annotation)}: {e}") from e
    expected = describe_type(annotation)

    def decode(value: Any) -> Any:
        try:
            return adapter.validate_python(value)
        except ValidationError as e:
            detail = f"{e.error_count()} validation error(s)"
            raise ResultTypeError(expected, json_shape(value), detail) from e

    return decode


def _element_decoder(annotation: Any) -> Decoder:
    """Decoder for the T in Optional[T] or list[T].

    Raises:
        GenerationError: If T is not a decodable shape.
    """
    if is_json_type(annotation):
        return _identity
    if (
        annotation is bool
        or annotation in _SCALAR_KINDS
        or is_model_type(annotation)
        or is_mapping_type(annotation)
        or sequence_inner(annotation) is not None
        or optional_inner(annotation) is not None
    ):
        return _adapter_decoder(annotation)
    raise GenerationError(f"Unsupported element type: {describe_type(annotation)}")


def _optional_plan(inner: Any) -> ReturnPlan:
    base = plan_return(inner)
    decode_inner = base.decode

    def decode_optional(ret: Any) -> Any:
        return None if ret is None else decode_inner(ret)

    # OBJECT already lets null through; other kinds need the nullable flag
    return ReturnPlan(base.kind, decode_optional, nullable=base.kind is not CallKind.OBJECT)


def _list_plan(element: Any) -> ReturnPlan:
    decode_element = _element_decoder(element)
    if decode_element is _identity:
        return ReturnPlan(CallKind.OBJLIST)

    def decode_list(items: list[Any]) -> list[Any]:
        return [decode_element(item) for item in items]

    return ReturnPlan(CallKind.OBJLIST, decode_list)


def plan_return(annotation: Any) -> ReturnPlan:
    """Choose the call-kind and post-processing for a declared return type.

    Raises:
        GenerationError: If the type matches none of the supported patterns.
    """
    # bool before int: bool is an int subclass
    if annotation is bool:
        return ReturnPlan(CallKind.INT, _to_bool)

    inner = optional_inner(annotation)
    if inner is not None:
        return _optional_plan(inner)

    element = sequence_inner(annotation)
    if element is not None:
        return _list_plan(element)

    if is_model_type(annotation) or is_mapping_type(annotation):
        return ReturnPlan(CallKind.OBJECT, _adapter_decoder(annotation))

    if annotation in _SCALAR_KINDS:
        return ReturnPlan(_SCALAR_KINDS[annotation])

    if is_json_type(annotation):
        return ReturnPlan(CallKind.JSON)

    raise GenerationError(f"Unsupported return type: {describe_type(annotation)}")


def _expand_fields(annotation: Any) -> list[tuple[str, Any]]:
    """Field names and types of a structured parameter, in declaration order."""
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return [(name, info.annotation) for name, info in annotation.model_fields.items()]
    if isinstance(annotation, type) and dataclasses.is_dataclass(annotation):
        try:
            hints = typing.get_type_hints(annotation)
        except (NameError, TypeError) as e:
            raise GenerationError(f"cannot resolve fields of {annotation.__name__}: {e}") from e
        return [(f.name, hints[f.name]) for f in dataclasses.fields(annotation)]
    raise GenerationError(
        f"expand requires a dataclass or pydantic model parameter, got {describe_type(annotation)}"
    )


@dataclass(frozen=True)
class MethodPlan:
    """Everything a generated stub needs to perform one call.

    Attributes:
        name: Python method name.
        wire_name: Function name sent to the server.
        signature: Declared signature, ``self`` included.
        converters: (parameter name, converter) pairs in declaration order.
        expand_fields: For expand methods, (field name, converter) pairs of
            the single structured parameter.
        returns: Result plan.
        doc: Docstring of the declaration.
    """

    name: str
    wire_name: str
    signature: inspect.Signature
    converters: tuple[tuple[str, Converter], ...]
    returns: ReturnPlan
    expand_fields: tuple[tuple[str, Converter], ...] | None = None
    doc: str | None = None

    def encode_args(self, instance: Any, args: tuple[Any, ...], kwargs: dict[str, Any]) -> list[Value]:
        """Bind call arguments to the declared signature and convert them.

        Raises:
            TypeError: If the arguments do not match the declared signature.
        """
        bound = self.signature.bind(instance, *args, **kwargs)
        bound.apply_defaults()
        if self.expand_fields is not None:
            ((param_name, _),) = self.converters
            record = bound.arguments[param_name]
            return [convert(getattr(record, field)) for field, convert in self.expand_fields]
        return [convert(bound.arguments[name]) for name, convert in self.converters]


def resolve_wire_name(method: MethodDescription, prefix: str | None) -> str:
    """Override name if given, else ``prefix_method``, else the method name."""
    if method.options.name is not None:
        return method.options.name
    if prefix:
        return f"{prefix}_{method.name}"
    return method.name


def compile_method(method: MethodDescription, prefix: str | None) -> MethodPlan:
    """Compile one method declaration.

    Raises:
        GenerationError: If a parameter or the return type is unsupported.
    """
    converters = tuple((param.name, converter_for(param.annotation)) for param in method.parameters)
    expand_fields = None
    if method.options.expand:
        if len(method.parameters) != 1:
            raise GenerationError("expand requires exactly one parameter")
        expand_fields = tuple(
            (name, converter_for(annotation))
            for name, annotation in _expand_fields(method.parameters[0].annotation)
        )

    return MethodPlan(
        name=method.name,
        wire_name=resolve_wire_name(method, prefix),
        signature=method.signature,
        converters=converters,
        returns=plan_return(method.return_type),
        expand_fields=expand_fields,
        doc=method.doc,
    )


@dataclass(frozen=True)
class CompiledInterface:
    """Call plans for every method of an interface."""

    name: str
    methods: dict[str, MethodPlan]
    prefix: str | None = None
    service: str | None = None


def compile_interface(description: InterfaceDescription) -> CompiledInterface:
    """Compile every method of an interface.

    Raises:
        GenerationError: Naming the first method that cannot be compiled.
    """
    plans: dict[str, MethodPlan] = {}
    for name, method in description.methods.items():
        try:
            plans[name] = compile_method(method, description.prefix)
        except GenerationError as e:
            raise GenerationError(f"{description.name}.{name}: {e.message}") from e
    return CompiledInterface(
        name=description.name,
        methods=plans,
        prefix=description.prefix,
        service=description.service,
    )
