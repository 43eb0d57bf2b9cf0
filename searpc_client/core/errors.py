"""Typed exception hierarchy for searpc-client."""

from __future__ import annotations


class SearpcError(Exception):
    """Base class for all searpc-client errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(SearpcError):
    """Raised for invalid connection settings."""


class RpcError(SearpcError):
    """The server reported a failure through err_code/err_msg.

    Attributes:
        code: Error code sent by the server.
        message: Error message sent by the server.
    """

    def __init__(self, code: int, message: str) -> None:
        self.code = code
        super().__init__(message)

    def __str__(self) -> str:
        return f"RPC error {self.code}: {self.message}"


class TransportError(SearpcError):
    """I/O failure or malformed framing. Fatal to the connection."""


class ConnectionClosedError(TransportError):
    """The peer closed the stream before a complete frame arrived."""


class FrameSizeError(TransportError):
    """A frame length is zero or exceeds the framing cap."""

    def __init__(self, length: int, limit: int, direction: str) -> None:
        self.length = length
        self.limit = limit
        self.direction = direction
        if length == 0:
            message = f"{direction.capitalize()} frame with zero length"
        else:
            message = f"{direction.capitalize()} frame too large: {length} > {limit}"
        super().__init__(message)


class DecodeError(SearpcError):
    """A received frame is not a well-formed response envelope."""


class ResultTypeError(SearpcError):
    """The ret value does not have the shape the call expects.

    Attributes:
        expected: Description of the expected shape.
        actual: Description of what the server sent.
    """

    def __init__(self, expected: str, actual: str, detail: str | None = None) -> None:
        self.expected = expected
        self.actual = actual
        message = f"Expected {expected}, got {actual}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class GenerationError(SearpcError):
    """An interface declaration cannot be compiled into stubs."""


class ClientBusyError(SearpcError):
    """A call was issued while another call was still in flight."""
