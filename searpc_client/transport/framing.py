"""Length-prefixed framing policies.

searpc servers speak one of two framings over a byte stream:

- Packet framing (demo server): 16-bit big-endian length, then the request
  or response JSON as-is. At most 65 535 payload bytes.
- Named-pipe framing (Seafile daemon): 32-bit native-endian length. Outgoing
  requests are wrapped as ``{"service": ..., "request": "<json string>"}``;
  incoming responses are plain response objects.

Native endianness assumes client and daemon share a host. Talking to a
daemon on a machine of different byte order is not supported.

A policy only turns payloads into frames and headers into lengths. The sync
and async transports do the I/O and share these policies, so both produce
identical bytes for the same message.
"""

import struct
from abc import ABC, abstractmethod

from searpc_client.core.errors import FrameSizeError
from searpc_client.rpc.protocol import wrap_request

PACKET_MAX_FRAME_SIZE: int = 65535
NAMED_PIPE_MAX_FRAME_SIZE: int = 2**32 - 1

# Cap for incoming named-pipe frames. A corrupt header would otherwise ask
# for up to 4 GiB.
DEFAULT_MAX_FRAME_SIZE: int = 64 * 1024 * 1024


class FramingPolicy(ABC):
    """How one message is delimited on a byte stream."""

    header: struct.Struct
    limit: int

    def __init__(self, max_frame_size: int | None = None) -> None:
        if max_frame_size is None:
            max_frame_size = self.limit
        if not 0 < max_frame_size <= self.limit:
            raise ValueError(f"max_frame_size must be between 1 and {self.limit}")
        self.max_frame_size = max_frame_size

    @property
    def header_size(self) -> int:
        return self.header.size

    def check_length(self, length: int, direction: str) -> None:
        """Reject empty frames and frames above the cap.

        Raises:
            FrameSizeError: If the length is zero or too large.
        """
        if length == 0 or length > self.max_frame_size:
            raise FrameSizeError(length, self.max_frame_size, direction)

    def pack_header(self, length: int) -> bytes:
        return self.header.pack(length)

    def unpack_header(self, header: bytes) -> int:
        """Return the payload length announced by a header.

        Raises:
            FrameSizeError: If the announced length is zero or too large.
        """
        (length,) = self.header.unpack(header)
        self.check_length(length, "incoming")
        return length

    @abstractmethod
    def prepare_outgoing(self, payload: bytes) -> bytes:
        """Turn an encoded request into the frame body actually sent."""
        ...

    def encode_frame(self, payload: bytes) -> bytes:
        """Build the complete outgoing frame (header + body) for a request.

        Raises:
            FrameSizeError: If the body does not fit this framing.
        """
        body = self.prepare_outgoing(payload)
        self.check_length(len(body), "outgoing")
        return self.pack_header(len(body)) + body


class PacketFraming(FramingPolicy):
    """16-bit big-endian length prefix, payload sent unwrapped."""

    header = struct.Struct(">H")
    limit = PACKET_MAX_FRAME_SIZE

    def prepare_outgoing(self, payload: bytes) -> bytes:
        return payload

    def __repr__(self) -> str:
        return f"PacketFraming(max_frame_size={self.max_frame_size})"


class NamedPipeFraming(FramingPolicy):
    """32-bit native-endian length prefix, requests wrapped with a service name.

    Attributes:
        service: Service name the daemon routes requests by
            (e.g. "seafile-rpcserver").
    """

    header = struct.Struct("=I")
    limit = NAMED_PIPE_MAX_FRAME_SIZE

    def __init__(self, service: str, max_frame_size: int | None = DEFAULT_MAX_FRAME_SIZE) -> None:
        super().__init__(max_frame_size)
        if not service:
            raise ValueError("service name must not be empty")
        self.service = service

    def prepare_outgoing(self, payload: bytes) -> bytes:
        return wrap_request(self.service, payload)

    def __repr__(self) -> str:
        return f"NamedPipeFraming(service={self.service!r}, max_frame_size={self.max_frame_size})"
