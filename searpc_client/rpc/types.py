"""Request and response envelopes of the searpc wire protocol."""

from dataclasses import dataclass, field
from typing import Any

from searpc_client.core.errors import RpcError
from searpc_client.core.values import Value

# Code used when the server sends err_msg without err_code
UNKNOWN_ERROR_CODE = -1


@dataclass
class Request:
    """A function call: ``["function_name", arg1, arg2, ...]`` on the wire.

    Attributes:
        function_name: Server-side function to invoke.
        args: Arguments in call order.
    """

    function_name: str
    args: list[Value] = field(default_factory=list)

    def to_json(self) -> list[Any]:
        """Return the JSON array for this request."""
        return [self.function_name, *(arg.to_json() for arg in self.args)]


@dataclass
class Response:
    """A server reply: ``{"ret": ..., "err_code": ..., "err_msg": ...}``.

    Attributes:
        ret: Return value. Its meaning depends on the call-kind.
        err_code: Error code, present only on failure.
        err_msg: Error message, present only on failure.
    """

    ret: Any = None
    err_code: int | None = None
    err_msg: str | None = None

    @property
    def is_error(self) -> bool:
        return self.err_code is not None or self.err_msg is not None

    def raise_for_error(self) -> None:
        """Raise RpcError if the server reported a failure.

        Error presence wins over any ret value sent alongside it.
        """
        if not self.is_error:
            return
        code = self.err_code if self.err_code is not None else UNKNOWN_ERROR_CODE
        raise RpcError(code, self.err_msg if self.err_msg is not None else "Unknown error")


@dataclass
class WrappedRequest:
    """Named-pipe envelope carrying a service name and a serialized request.

    ``request`` holds the request array already encoded as a JSON string.
    """

    service: str
    request: str

    def to_json(self) -> dict[str, str]:
        return {"service": self.service, "request": self.request}
