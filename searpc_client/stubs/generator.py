"""Generate interface implementations from compiled call plans.

``@rpc`` compiles an interface class when it is defined and attaches two
generated implementations: a blocking one for SearpcClient and an asyncio
one for AsyncSearpcClient. ``bind`` picks the right one for a client.

Usage:
    @rpc(prefix="searpc")
    class DemoRpc:
        def strlen(self, s: str) -> int: ...

    demo = bind(DemoRpc, SearpcClient(transport))
    demo.strlen("hello")          # calls searpc_strlen
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any, TypeVar, overload

from searpc_client.core.errors import GenerationError
from searpc_client.stubs.compiler import CompiledInterface, MethodPlan, compile_interface
from searpc_client.stubs.description import describe_interface

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=type)

COMPILED_ATTR = "__searpc_interface__"
SYNC_IMPL_ATTR = "__searpc_sync_impl__"
ASYNC_IMPL_ATTR = "__searpc_async_impl__"


def _sync_stub(plan: MethodPlan) -> Callable[..., Any]:
    returns = plan.returns

    def stub(self: Any, *args: Any, **kwargs: Any) -> Any:
        values = plan.encode_args(self, args, kwargs)
        ret = self._client.call_kind(returns.kind, plan.wire_name, values, returns.nullable)
        return returns.decode(ret)

    return stub


def _async_stub(plan: MethodPlan) -> Callable[..., Any]:
    returns = plan.returns

    async def stub(self: Any, *args: Any, **kwargs: Any) -> Any:
        values = plan.encode_args(self, args, kwargs)
        ret = await self._client.call_kind(returns.kind, plan.wire_name, values, returns.nullable)
        return returns.decode(ret)

    return stub


def _finish_stub(stub: Callable[..., Any], plan: MethodPlan, owner: str) -> Callable[..., Any]:
    stub.__name__ = plan.name
    stub.__qualname__ = f"{owner}.{plan.name}"
    stub.__doc__ = plan.doc
    stub.__signature__ = plan.signature  # type: ignore[attr-defined]
    return stub


def _client_init(self: Any, client: Any) -> None:
    self._client = client


def _client_property(self: Any) -> Any:
    return self._client


def generate_stub_class(
    compiled: CompiledInterface,
    interface: type | None = None,
    asynchronous: bool = False,
) -> type:
    """Build the implementation class for a compiled interface.

    The blocking implementation subclasses the interface, so instances pass
    ``isinstance`` checks against it.

    Args:
        compiled: Call plans for the interface.
        interface: Declared interface class, if any.
        asynchronous: Generate coroutine methods for AsyncSearpcClient.
    """
    prefix = "Async" if asynchronous else ""
    class_name = f"{prefix}{compiled.name}Client"
    make_stub = _async_stub if asynchronous else _sync_stub

    namespace: dict[str, Any] = {
        "__init__": _client_init,
        "__doc__": f"Generated {'asyncio' if asynchronous else 'blocking'} client for {compiled.name}.",
        "__module__": interface.__module__ if interface is not None else __name__,
        "client": property(_client_property),
        COMPILED_ATTR: compiled,
    }
    for name, plan in compiled.methods.items():
        namespace[name] = _finish_stub(make_stub(plan), plan, class_name)

    bases: tuple[type, ...] = (interface,) if interface is not None and not asynchronous else ()
    metaclass = type(interface) if bases else type
    stub_class = metaclass(class_name, bases, namespace)
    logger.debug(
        "Generated %s with %d method(s): %s",
        class_name,
        len(compiled.methods),
        ", ".join(f"{p.name}->{p.wire_name}" for p in compiled.methods.values()),
    )
    return stub_class


def _attach(interface: T, prefix: str | None, service: str | None) -> T:
    description = describe_interface(interface, prefix=prefix, service=service)
    compiled = compile_interface(description)
    setattr(interface, COMPILED_ATTR, compiled)
    setattr(interface, SYNC_IMPL_ATTR, generate_stub_class(compiled, interface, asynchronous=False))
    setattr(interface, ASYNC_IMPL_ATTR, generate_stub_class(compiled, interface, asynchronous=True))
    return interface


@overload
def rpc(interface: T, *, prefix: str | None = None, service: str | None = None) -> T: ...


@overload
def rpc(
    interface: None = None, *, prefix: str | None = None, service: str | None = None
) -> Callable[[T], T]: ...


def rpc(
    interface: T | None = None,
    *,
    prefix: str | None = None,
    service: str | None = None,
) -> T | Callable[[T], T]:
    """Class decorator compiling an RPC interface declaration.

    Usable bare (``@rpc``) or with options (``@rpc(prefix="seafile")``).

    Args:
        interface: The interface class (when used bare).
        prefix: Shared wire-name prefix; method ``get_version`` becomes
            ``prefix_get_version`` unless it has a name override.
        service: Service name for named-pipe framing.

    Raises:
        GenerationError: At decoration time, if any declaration is unsupported.
    """

    def decorate(cls: T) -> T:
        return _attach(cls, prefix, service)

    if interface is None:
        return decorate
    return decorate(interface)


def compiled_interface(interface: type) -> CompiledInterface:
    """Return the compiled plans of an ``@rpc`` interface.

    Raises:
        GenerationError: If the class was not decorated with ``@rpc``.
    """
    compiled = interface.__dict__.get(COMPILED_ATTR)
    if compiled is None:
        raise GenerationError(f"{interface.__name__} is not an @rpc interface")
    return compiled


def generate(
    interface: type,
    asynchronous: bool = False,
    prefix: str | None = None,
    service: str | None = None,
) -> type:
    """Return the generated implementation class for an interface.

    Decorated interfaces return their cached classes; undecorated ones are
    compiled on the spot with the given prefix and service.

    Raises:
        GenerationError: If the interface cannot be compiled.
    """
    if COMPILED_ATTR not in interface.__dict__:
        compiled = compile_interface(describe_interface(interface, prefix=prefix, service=service))
        return generate_stub_class(compiled, interface, asynchronous)
    return interface.__dict__[ASYNC_IMPL_ATTR if asynchronous else SYNC_IMPL_ATTR]


def bind(interface: type, client: Any) -> Any:
    """Instantiate an interface implementation over a client.

    The asyncio implementation is chosen when the client's ``call_kind`` is
    a coroutine function (AsyncSearpcClient), the blocking one otherwise.

    Raises:
        GenerationError: If the interface is not an ``@rpc`` interface.
    """
    compiled_interface(interface)
    asynchronous = inspect.iscoroutinefunction(client.call_kind)
    return generate(interface, asynchronous=asynchronous)(client)


def wire_names(interface: type) -> dict[str, str]:
    """Map each Python method name of an interface to its wire function name."""
    return {name: plan.wire_name for name, plan in compiled_interface(interface).methods.items()}

