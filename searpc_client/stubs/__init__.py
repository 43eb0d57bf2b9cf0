"""Typed client stubs generated from interface declarations.

Example usage:
    @rpc(prefix="seafile", service="seafile-rpcserver")
    class SeafileRpc:
        def get_repo_list(self, start: int, limit: int) -> list[Repo]: ...

        @rpc_method(name="seafile_is_auto_sync_enabled")
        def is_auto_sync_enabled(self) -> bool: ...

    seafile = bind(SeafileRpc, client)
    repos = seafile.get_repo_list(-1, -1)
"""

from searpc_client.stubs.compiler import (
    CompiledInterface,
    MethodPlan,
    ReturnPlan,
    compile_interface,
    compile_method,
    plan_return,
    resolve_wire_name,
)
from searpc_client.stubs.description import (
    InterfaceDescription,
    MethodDescription,
    MethodOptions,
    ParameterDescription,
    describe_interface,
    describe_method,
    rpc_method,
)
from searpc_client.stubs.generator import (
    bind,
    compiled_interface,
    generate,
    generate_stub_class,
    rpc,
    wire_names,
)

__all__ = [
    # Decorators
    "rpc",
    "rpc_method",
    # Binding
    "bind",
    "generate",
    "wire_names",
    "compiled_interface",
    # Description
    "InterfaceDescription",
    "MethodDescription",
    "MethodOptions",
    "ParameterDescription",
    "describe_interface",
    "describe_method",
    # Compilation
    "CompiledInterface",
    "MethodPlan",
    "ReturnPlan",
    "compile_interface",
    "compile_method",
    "plan_return",
    "resolve_wire_name",
    "generate_stub_class",
]
