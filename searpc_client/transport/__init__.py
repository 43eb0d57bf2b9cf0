"""Framed byte-stream transports for searpc.

Provides:
- PacketFraming: 16-bit big-endian length prefix (demo server)
- NamedPipeFraming: 32-bit native-endian prefix with service wrapping (Seafile)
- SocketTransport: blocking implementation over a socket
- StreamTransport: asyncio implementation over a stream pair
"""

from searpc_client.transport.aio import StreamTransport
from searpc_client.transport.base import AsyncMessageTransport, MessageTransport
from searpc_client.transport.framing import (
    DEFAULT_MAX_FRAME_SIZE,
    NAMED_PIPE_MAX_FRAME_SIZE,
    PACKET_MAX_FRAME_SIZE,
    FramingPolicy,
    NamedPipeFraming,
    PacketFraming,
)
from searpc_client.transport.sync import SocketTransport

__all__ = [
    # Interfaces
    "MessageTransport",
    "AsyncMessageTransport",
    # Framing
    "FramingPolicy",
    "PacketFraming",
    "NamedPipeFraming",
    "PACKET_MAX_FRAME_SIZE",
    "NAMED_PIPE_MAX_FRAME_SIZE",
    "DEFAULT_MAX_FRAME_SIZE",
    # Implementations
    "SocketTransport",
    "StreamTransport",
]
