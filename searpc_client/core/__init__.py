"""Core value model and error types."""

from searpc_client.core.errors import (
    ClientBusyError,
    ConfigError,
    ConnectionClosedError,
    DecodeError,
    FrameSizeError,
    GenerationError,
    ResultTypeError,
    RpcError,
    SearpcError,
    TransportError,
)
from searpc_client.core.values import Int64, Json, Value, ValueKind, converter_for

__all__ = [
    "SearpcError",
    "ConfigError",
    "RpcError",
    "TransportError",
    "ConnectionClosedError",
    "FrameSizeError",
    "DecodeError",
    "ResultTypeError",
    "GenerationError",
    "ClientBusyError",
    # Values
    "Value",
    "ValueKind",
    "Int64",
    "Json",
    "converter_for",
]
