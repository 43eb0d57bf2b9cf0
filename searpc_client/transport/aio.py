"""Asyncio stream transport.

Same framing and failure rules as the blocking SocketTransport, with control
suspending only while connecting, writing a frame or waiting for one.
"""

import asyncio
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


class StreamTransport:
    """Send and receive framed messages over an asyncio stream pair.

    Cancelling a send or receive leaves the stream mid-frame (or with a reply
    still in flight), so the transport refuses further use and the
    connection must be recreated.

    Usage:
        transport = await StreamTransport.open_tcp("127.0.0.1", 12345)
        async with AsyncSearpcClient(transport) as client:
            version = await client.call_string("get_version", [])
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        framing: FramingPolicy,
    ) -> None:
        """Initialize over an already-connected stream pair.

        Args:
            reader: Stream to read response frames from.
            writer: Stream to write request frames to.
            framing: Framing policy the peer speaks.
        """
        self._reader = reader
        self._writer = writer
        self._framing = framing
        self._broken: str | None = None
        self._closed = False

    @classmethod
    async def open_tcp(
        cls,
        host: str,
        port: int,
        timeout: float | None = None,
        max_frame_size: int | None = None,
    ) -> "StreamTransport":
        """Connect to a packet-framed server over TCP.

        Raises:
            TransportError: If the connection cannot be established.
        """
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port), timeout=timeout
            )
        except TimeoutError as e:
            logger.warning("Connection to %s:%s timed out after %ss", host, port, timeout)
            raise TransportError(f"Connection timed out after {timeout}s") from e
        except OSError as e:
            logger.warning("Connection failed to %s:%s: %s", host, port, e)
            raise TransportError(f"Connection failed: {e}") from e
        logger.debug("Connected to %s:%s (packet framing)", host, port)
        return cls(reader, writer, PacketFraming(max_frame_size))

    @classmethod
    async def open_unix(
        cls,
        path: str | os.PathLike[str],
        service: str,
        timeout: float | None = None,
        max_frame_size: int | None = DEFAULT_MAX_FRAME_SIZE,
    ) -> "StreamTransport":
        """Connect to a named-pipe-framed daemon over a Unix domain socket.

        Raises:
            TransportError: If the connection cannot be established.
        """
        framing = NamedPipeFraming(service, max_frame_size)
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_unix_connection(os.fspath(path)), timeout=timeout
            )
        except TimeoutError as e:
            logger.warning("Connection to %s timed out after %ss", path, timeout)
            raise TransportError(f"Connection timed out after {timeout}s") from e
        except OSError as e:
            logger.warning("Connection failed to %s: %s", path, e)
            raise TransportError(f"Connection failed: {e}") from e
        logger.debug("Connected to %s (service=%s)", path, service)
        return cls(reader, writer, framing)

    @classmethod
    async def from_socket(cls, sock: socket.socket, framing: FramingPolicy) -> "StreamTransport":
        """Wrap an already-connected socket (e.g. one end of a socketpair)."""
        reader, writer = await asyncio.open_connection(sock=sock)
        return cls(reader, writer, framing)

    @property
    def framing(self) -> FramingPolicy:
        return self._framing

    @property
    def is_usable(self) -> bool:
        """False once closed, after a failure, or after a cancelled operation."""
        return not self._closed and self._broken is None

    def _check_usable(self) -> None:
        if self._closed:
            raise TransportError("Transport is closed")
        if self._broken is not None:
            raise TransportError(f"Transport unusable after earlier failure: {self._broken}")

    def _mark_broken(self, reason: str) -> None:
        self._broken = reason
        logger.warning("Transport failed: %s", reason)

    async def send(self, message: bytes) -> None:
        """Write one frame carrying ``message``.

        An oversized message is rejected before anything is written.
        """
        self._check_usable()
        frame = self._framing.encode_frame(message)
        try:
            self._writer.write(frame)
            await self._writer.drain()
        except asyncio.CancelledError:
            self._mark_broken("Send cancelled mid-frame")
            raise
        except OSError as e:
            self._mark_broken(f"Write failed: {e}")
            raise TransportError(f"Write failed: {e}") from e

    async def receive(self) -> bytes:
        """Wait until one complete frame arrives and return its payload."""
        self._check_usable()
        try:
            header = await self._reader.readexactly(self._framing.header_size)
            length = self._framing.unpack_header(header)
            return await self._reader.readexactly(length)
        except asyncio.CancelledError:
            self._mark_broken("Receive cancelled before the frame completed")
            raise
        except asyncio.IncompleteReadError as e:
            reason = f"Connection closed after {len(e.partial)} of {e.expected} bytes"
            self._mark_broken(reason)
            raise ConnectionClosedError(reason) from e
        except FrameSizeError as e:
            self._mark_broken(e.message)
            raise
        except OSError as e:
            self._mark_broken(f"Read failed: {e}")
            raise TransportError(f"Read failed: {e}") from e

    async def close(self) -> None:
        """Close the stream. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except OSError as e:
            logger.debug("Stream close error (expected during shutdown): %s", e)

    async def __aenter__(self) -> "StreamTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"StreamTransport({self._framing!r})"
