"""Interface descriptions: what a declared RPC interface says.

An interface is a plain class (or typing.Protocol) whose public methods
carry type annotations. Only the declaration is read; method bodies are
never called.

Example:
    class DemoRpc:
        def strlen(self, s: str) -> int: ...

        @rpc_method(name="searpc_objlisttest")
        def objlist(self, count: int, len: int, s: str) -> list[TestObject]: ...
"""

import inspect
import typing
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from searpc_client.core.errors import GenerationError

F = TypeVar("F", bound=Callable[..., Any])

METHOD_OPTIONS_ATTR = "__searpc_method__"


@dataclass(frozen=True)
class MethodOptions:
    """Per-method options set with @rpc_method.

    Attributes:
        name: Wire function name. When set, the interface prefix is skipped.
        expand: Send the fields of the single structured parameter as
            separate positional arguments.
    """

    name: str | None = None
    expand: bool = False


def rpc_method(name: str | None = None, *, expand: bool = False) -> Callable[[F], F]:
    """Attach per-method options to an interface method.

    Args:
        name: Override the wire function name (prefix not applied).
        expand: Spread the fields of the method's only parameter into
            positional RPC arguments.
    """
    if name is not None and not name:
        raise ValueError("rpc_method name must not be empty")

    def decorate(func: F) -> F:
        setattr(func, METHOD_OPTIONS_ATTR, MethodOptions(name=name, expand=expand))
        return func

    return decorate


@dataclass
class ParameterDescription:
    """One declared parameter (``self`` excluded)."""

    name: str
    annotation: Any


@dataclass
class MethodDescription:
    """One declared method.

    Attributes:
        name: Python method name.
        parameters: Declared parameters in order.
        return_type: Declared return annotation.
        signature: Full signature including ``self``, used to bind call arguments.
        options: Name override and expand flag.
        doc: Docstring copied onto the generated stub.
    """

    name: str
    parameters: list[ParameterDescription]
    return_type: Any
    signature: inspect.Signature
    options: MethodOptions = field(default_factory=MethodOptions)
    doc: str | None = None


@dataclass
class InterfaceDescription:
    """A named group of method declarations.

    Attributes:
        name: Interface class name.
        methods: Declared methods, keyed by Python name.
        prefix: Shared wire-name prefix (``prefix + "_" + method``).
        service: Service name for named-pipe framing, if the interface
            belongs to one daemon service.
    """

    name: str
    methods: dict[str, MethodDescription]
    prefix: str | None = None
    service: str | None = None


def _interface_functions(interface: type) -> dict[str, Callable[..., Any]]:
    """Collect public functions declared on the class and its bases."""
    functions: dict[str, Callable[..., Any]] = {}
    for klass in reversed(interface.__mro__):
        if klass is object or klass.__module__ == "typing":
            continue
        for attr_name, member in vars(klass).items():
            if attr_name.startswith("_"):
                continue
            if inspect.isfunction(member):
                functions[attr_name] = member
    return functions


def describe_method(interface_name: str, func: Callable[..., Any]) -> MethodDescription:
    """Read one method declaration.

    Raises:
        GenerationError: If annotations are missing or cannot be resolved, or
            the signature uses ``*args``/``**kwargs`` or lacks ``self``.
    """
    qualified = f"{interface_name}.{func.__name__}"
    try:
        hints = typing.get_type_hints(func)
    except (NameError, TypeError) as e:
        raise GenerationError(f"{qualified}: cannot resolve annotations: {e}") from e

    if "return" not in hints:
        raise GenerationError(f"{qualified}: missing return type annotation")

    signature = inspect.signature(func)
    params = list(signature.parameters.values())
    if not params or params[0].kind not in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        raise GenerationError(f"{qualified}: first parameter must be self")

    parameters: list[ParameterDescription] = []
    for param in params[1:]:
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            raise GenerationError(f"{qualified}: *args/**kwargs cannot be sent as RPC arguments")
        if param.name not in hints:
            raise GenerationError(f"{qualified}: parameter {param.name!r} has no type annotation")
        parameters.append(ParameterDescription(param.name, hints[param.name]))

    return MethodDescription(
        name=func.__name__,
        parameters=parameters,
        return_type=hints["return"],
        signature=signature,
        options=getattr(func, METHOD_OPTIONS_ATTR, MethodOptions()),
        doc=func.__doc__,
    )


def describe_interface(
    interface: type,
    prefix: str | None = None,
    service: str | None = None,
) -> InterfaceDescription:
    """Read every public method declaration of an interface class.

    Raises:
        GenerationError: If the class declares no methods or a declaration is invalid.
    """
    functions = _interface_functions(interface)
    if not functions:
        raise GenerationError(f"{interface.__name__}: interface declares no methods")

    methods = {
        name: describe_method(interface.__name__, func) for name, func in functions.items()
    }
    return InterfaceDescription(
        name=interface.__name__,
        methods=methods,
        prefix=prefix or None,
        service=service,
    )
