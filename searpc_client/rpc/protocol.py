"""searpc wire codec: request arrays, response objects and named-pipe wrapping."""

import json
from collections.abc import Iterable
from typing import Any

from searpc_client.core.errors import DecodeError
from searpc_client.core.values import Value
from searpc_client.rpc.types import Request, Response, WrappedRequest


def _dumps(data: Any) -> str:
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def serialize_request(request: Request) -> str:
    """Serialize a Request to its JSON array text.

    Args:
        request: The Request object to serialize.

    Returns:
        Compact JSON text such as ``["get_substring","hello",2]``.
    """
    return _dumps(request.to_json())


def encode_request(function_name: str, values: Iterable[Value]) -> bytes:
    """Encode a function call to UTF-8 JSON bytes, arguments in the order given."""
    return serialize_request(Request(function_name, list(values))).encode("utf-8")


def wrap_request(service: str, request: bytes) -> bytes:
    """Wrap encoded request bytes in the named-pipe service envelope.

    The request is embedded as a JSON *string*, not as a nested array:
    ``{"service":"svc","request":"[\\"fn\\",1]"}``. The production server
    decodes the string a second time and rejects a nested array.

    Raises:
        DecodeError: If the request bytes are not valid UTF-8.
    """
    try:
        request_text = request.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Request is not valid UTF-8: {e}") from e
    return _dumps(WrappedRequest(service, request_text).to_json()).encode("utf-8")


def parse_response(text: str) -> Response:
    """Parse JSON text into a Response.

    Args:
        text: JSON text of one response frame.

    Returns:
        A parsed Response object. Server-reported errors are not raised here;
        call ``Response.raise_for_error()``.

    Raises:
        DecodeError: If the JSON is invalid or required fields are missing.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise DecodeError(f"Response must be a JSON object, got: {type(data).__name__}")

    err_code = data.get("err_code")
    if err_code is not None and (isinstance(err_code, bool) or not isinstance(err_code, int)):
        raise DecodeError(f"err_code must be an integer, got: {type(err_code).__name__}")

    err_msg = data.get("err_msg")
    if err_msg is not None and not isinstance(err_msg, str):
        raise DecodeError(f"err_msg must be a string, got: {type(err_msg).__name__}")

    # Error replies may omit ret; successful ones must carry it
    if "ret" not in data and err_code is None and err_msg is None:
        raise DecodeError("Response must have a 'ret' field")

    return Response(ret=data.get("ret"), err_code=err_code, err_msg=err_msg)


def decode_response(data: bytes) -> Response:
    """Decode one response frame payload.

    Raises:
        DecodeError: If the payload is not UTF-8 or not a valid response.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Response is not valid UTF-8: {e}") from e
    return parse_response(text)


# === Server-side functions (used by test servers and tooling) ===


def parse_request(text: str) -> Request:
    """Parse a JSON request array back into a Request.

    Argument kinds are inferred from their JSON types, so a small INT64
    comes back as INT; the encoded JSON is the same either way.

    Raises:
        DecodeError: If the text is not a JSON array starting with a function name.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON: {e}") from e

    if not isinstance(data, list) or not data:
        raise DecodeError("Request must be a non-empty JSON array")
    function_name = data[0]
    if not isinstance(function_name, str):
        raise DecodeError(f"Function name must be a string, got: {type(function_name).__name__}")

    return Request(function_name, [Value.from_python(arg) for arg in data[1:]])


def serialize_response(response: Response) -> str:
    """Serialize a Response to JSON text.

    Error fields are only emitted when set.
    """
    data: dict[str, Any] = {"ret": response.ret}
    if response.err_code is not None:
        data["err_code"] = response.err_code
    if response.err_msg is not None:
        data["err_msg"] = response.err_msg
    return _dumps(data)


def unwrap_request(data: bytes) -> tuple[str, bytes]:
    """Split a named-pipe envelope into its service name and request bytes.

    Raises:
        DecodeError: If the envelope is malformed or ``request`` is not a string.
    """
    try:
        envelope = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError(f"Invalid wrapped request: {e}") from e
    if not isinstance(envelope, dict):
        raise DecodeError("Wrapped request must be a JSON object")
    service = envelope.get("service")
    request = envelope.get("request")
    if not isinstance(service, str):
        raise DecodeError("Wrapped request must have a string 'service' field")
    if not isinstance(request, str):
        raise DecodeError("Wrapped request 'request' field must be a JSON string")
    return service, request.encode("utf-8")
