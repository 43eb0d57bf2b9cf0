"""Shared pytest fixtures and configuration for pytest."""

import socket
import struct
import sys
import threading
from collections.abc import Callable, Iterator
from typing import Any

import pytest

from searpc_client.rpc.protocol import parse_request, serialize_response, unwrap_request
from searpc_client.rpc.types import Response

# Handler result: a dict of Response fields, raw bytes (sent as-is), or None
# (close the connection without answering)
Handler = Callable[[str, list[Any]], Any]


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for platform-specific tests."""
    config.addinivalue_line("markers", "unix_only: mark test to run only on Unix")


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Auto-skip tests based on platform markers."""
    skip_unix = pytest.mark.skip(reason="Unix-only test")

    for item in items:
        if "unix_only" in item.keywords and sys.platform == "win32":
            item.add_marker(skip_unix)


class FakeServer:
    """Answers framed searpc requests on one end of a socket pair.

    Runs in a thread so both the blocking and the asyncio transports can talk
    to it. Every request body received is recorded in ``frames``; the parsed
    request arrays go to ``requests`` and, for named-pipe framing, the
    service names to ``services``.
    """

    def __init__(self, sock: socket.socket, named_pipe: bool, handler: Handler) -> None:
        self.sock = sock
        self.named_pipe = named_pipe
        self.header = struct.Struct("=I" if named_pipe else ">H")
        self.handler = handler
        self.frames: list[bytes] = []
        self.requests: list[list[Any]] = []
        self.services: list[str] = []
        self._thread = threading.Thread(target=self._run, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def _read_exact(self, size: int) -> bytes | None:
        data = b""
        while len(data) < size:
            try:
                chunk = self.sock.recv(size - len(data))
            except OSError:
                return None
            if not chunk:
                return None
            data += chunk
        return data

    def _run(self) -> None:
        while True:
            header = self._read_exact(self.header.size)
            if header is None:
                return
            (length,) = self.header.unpack(header)
            body = self._read_exact(length)
            if body is None:
                return
            self.frames.append(body)
            request = body
            if self.named_pipe:
                service, request = unwrap_request(body)
                self.services.append(service)
            call = parse_request(request.decode("utf-8"))
            args = [arg.to_json() for arg in call.args]
            self.requests.append([call.function_name, *args])

            reply = self.handler(call.function_name, args)
            if reply is None:
                self.sock.close()
                return
            if isinstance(reply, bytes):
                payload = reply
            else:
                payload = serialize_response(Response(**reply)).encode("utf-8")
            self.sock.sendall(self.header.pack(len(payload)) + payload)

    def stop(self) -> None:
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # already closed by the handler or the peer
        self._thread.join(timeout=5)
        self.sock.close()


def demo_handler(function_name: str, args: list[Any]) -> dict[str, Any]:
    """Behave like the searpc demo server for a handful of functions."""
    if function_name == "get_version":
        return {"ret": "7.0.5"}
    if function_name == "searpc_strlen":
        return {"ret": len(args[0].encode("utf-8"))}
    if function_name == "get_substring":
        return {"ret": args[0][: args[1]]}
    if function_name == "searpc_objlisttest":
        count, length, text = args
        return {"ret": [{"count": count, "len": length, "str": text} for _ in range(count)]}
    if function_name == "echo":
        return {"ret": args}
    return {"ret": None, "err_code": 501, "err_msg": f"Unknown function {function_name}"}


@pytest.fixture
def fake_server() -> Iterator[Callable[..., tuple[socket.socket, FakeServer]]]:
    """Factory starting a FakeServer and returning (client socket, server).

    Usage:
        client_sock, server = fake_server(handler, named_pipe=True)
    """
    servers: list[FakeServer] = []
    client_socks: list[socket.socket] = []

    def start(
        handler: Handler = demo_handler, named_pipe: bool = False
    ) -> tuple[socket.socket, FakeServer]:
        client_sock, server_sock = socket.socketpair()
        server = FakeServer(server_sock, named_pipe, handler)
        server.start()
        servers.append(server)
        client_socks.append(client_sock)
        return client_sock, server

    yield start

    for sock in client_socks:
        sock.close()
    for server in servers:
        server.stop()


@pytest.fixture
def reply_with() -> Callable[[Any], Handler]:
    """Build a handler answering every call with the same reply."""

    def build(reply: Any) -> Handler:
        def handler(function_name: str, args: list[Any]) -> Any:
            return reply

        return handler

    return build
