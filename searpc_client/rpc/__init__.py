"""searpc wire protocol support.

Requests are JSON arrays ``["function_name", arg1, ...]``; responses are
JSON objects ``{"ret": ..., "err_code": ..., "err_msg": ...}``.

Example usage:
    payload = encode_request("get_version", [])
    response = decode_response(frame)
    response.raise_for_error()
    version = decode_result(CallKind.STRING, response.ret)
"""

from searpc_client.rpc.protocol import (
    decode_response,
    encode_request,
    parse_request,
    parse_response,
    serialize_request,
    serialize_response,
    unwrap_request,
    wrap_request,
)
from searpc_client.rpc.results import CallKind, decode_result, json_shape
from searpc_client.rpc.types import UNKNOWN_ERROR_CODE, Request, Response, WrappedRequest

__all__ = [
    # Types
    "Request",
    "Response",
    "WrappedRequest",
    "UNKNOWN_ERROR_CODE",
    # Protocol functions (client-side)
    "encode_request",
    "serialize_request",
    "decode_response",
    "parse_response",
    "wrap_request",
    # Protocol functions (server-side)
    "parse_request",
    "serialize_response",
    "unwrap_request",
    # Results
    "CallKind",
    "decode_result",
    "json_shape",
]
