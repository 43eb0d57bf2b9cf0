"""Blocking socket transport.

Works with any connected stream socket: TCP for the packet-framed demo
server, AF_UNIX for the named-pipe-framed Seafile daemon.
"""

import logging
import os
import socket
from typing import Any

from searpc_client.core.errors import ConnectionClosedError, FrameSizeError, TransportError
from searpc_client.transport.framing import (
    DEFAULT_MAX_FRAME_SIZE,
    FramingPolicy,
    NamedPipeFraming,
    PacketFraming,
)

logger = logging.getLogger(__name__)

# Largest single recv() call while reading a frame body
READ_CHUNK_SIZE: int = 65536


class SocketTransport:
    """Send and receive framed messages over a blocking socket.

    The transport owns the socket. Once an I/O error or an incomplete frame
    has been seen, the stream position is unknown and every further call
    fails with TransportError; open a new connection instead.

    Usage:
        with SocketTransport.connect_unix(path, "seafile-rpcserver") as transport:
            client = SearpcClient(transport)
            ...
    """

    def __init__(self, sock: socket.socket, framing: FramingPolicy) -> None:
        """Initialize over an already-connected socket.

        Args:
            sock: Connected stream socket. Blocking mode is expected.
            framing: Framing policy the peer speaks.
        """
        self._sock = sock
        self._framing = framing
        self._broken: str | None = None
        self._closed = False

    @classmethod
    def connect_tcp(
        cls,
        host: str,
        port: int,
        timeout: float | None = None,
        max_frame_size: int | None = None,
    ) -> "SocketTransport":
        """Connect to a packet-framed server over TCP.

        Args:
            host: Server host.
            port: Server port.
            timeout: Connect timeout in seconds. Calls themselves never time out.
            max_frame_size: Optional cap below the 65 535-byte packet limit.

        Raises:
            TransportError: If the connection cannot be established.
        """
        try:
            sock = socket.create_connection((host, port), timeout=timeout)
        except OSError as e:
            logger.warning("Connection failed to %s:%s: %s", host, port, e)
            raise TransportError(f"Connection failed: {e}") from e
        sock.settimeout(None)
        logger.debug("Connected to %s:%s (packet framing)", host, port)
        return cls(sock, PacketFraming(max_frame_size))

    @classmethod
    def connect_unix(
        cls,
        path: str | os.PathLike[str],
        service: str,
        timeout: float | None = None,
        max_frame_size: int | None = DEFAULT_MAX_FRAME_SIZE,
    ) -> "SocketTransport":
        """Connect to a named-pipe-framed daemon over a Unix domain socket.

        Args:
            path: Socket path (e.g. ``<seafile-data>/seafile.sock``).
            service: Service name sent with every request.
            timeout: Connect timeout in seconds.
            max_frame_size: Cap for frames in either direction.

        Raises:
            TransportError: If the connection cannot be established.
        """
        framing = NamedPipeFraming(service, max_frame_size)
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.settimeout(timeout)
            sock.connect(os.fspath(path))
        except OSError as e:
            sock.close()
            logger.warning("Connection failed to %s: %s", path, e)
            raise TransportError(f"Connection failed: {e}") from e
        sock.settimeout(None)
        logger.debug("Connected to %s (service=%s)", path, service)
        return cls(sock, framing)

    @property
    def framing(self) -> FramingPolicy:
        return self._framing

    @property
    def is_usable(self) -> bool:
        """False once closed or after a failure that left the stream mid-frame."""
        return not self._closed and self._broken is None

    def _check_usable(self) -> None:
        if self._closed:
            raise TransportError("Transport is closed")
        if self._broken is not None:
            raise TransportError(f"Transport unusable after earlier failure: {self._broken}")

    def _mark_broken(self, reason: str) -> None:
        self._broken = reason
        logger.warning("Transport failed: %s", reason)

    def send(self, message: bytes) -> None:
        """Write one frame carrying ``message``.

        An oversized message is rejected before anything is written, so the
        connection stays usable.
        """
        self._check_usable()
        frame = self._framing.encode_frame(message)
        try:
            self._sock.sendall(frame)
        except OSError as e:
            self._mark_broken(f"Write failed: {e}")
            raise TransportError(f"Write failed: {e}") from e

    def receive(self) -> bytes:
        """Block until one complete frame arrives and return its payload."""
        self._check_usable()
        header = self._read_exact(self._framing.header_size)
        try:
            length = self._framing.unpack_header(header)
        except FrameSizeError as e:
            self._mark_broken(e.message)
            raise
        return self._read_exact(length)

    def _read_exact(self, size: int) -> bytes:
        chunks: list[bytes] = []
        received = 0
        while received < size:
            try:
                chunk = self._sock.recv(min(size - received, READ_CHUNK_SIZE))
            except OSError as e:
                self._mark_broken(f"Read failed: {e}")
                raise TransportError(f"Read failed: {e}") from e
            if not chunk:
                reason = f"Connection closed after {received} of {size} bytes"
                self._mark_broken(reason)
                raise ConnectionClosedError(reason)
            chunks.append(chunk)
            received += len(chunk)
        return b"".join(chunks)

    def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self._sock.close()
        except OSError as e:
            logger.debug("Socket close error: %s", e)

    def __enter__(self) -> "SocketTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"SocketTransport({self._framing!r})"
