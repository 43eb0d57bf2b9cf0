"""Pydantic models for searpc connection settings."""

from enum import Enum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from searpc_client.transport.framing import (
    DEFAULT_MAX_FRAME_SIZE,
    NAMED_PIPE_MAX_FRAME_SIZE,
    PACKET_MAX_FRAME_SIZE,
)


class FramingMode(str, Enum):
    """Wire framing spoken by the server."""

    PACKET = "packet"
    """16-bit big-endian length prefix over TCP (demo server)."""

    NAMED_PIPE = "named-pipe"
    """32-bit native-endian prefix over a Unix socket, with service wrapping."""


class TransportConfig(BaseModel):
    """How to reach a searpc server.

    Example for the Seafile daemon:
        {
            "framing": "named-pipe",
            "socket_path": "/home/me/.seafile-data/seafile.sock",
            "service": "seafile-rpcserver"
        }

    Example for the demo server:
        {"framing": "packet", "host": "127.0.0.1", "port": 12345}
    """

    model_config = ConfigDict(extra="forbid")

    framing: FramingMode = FramingMode.NAMED_PIPE
    """Framing policy to use."""

    host: str | None = None
    """Server host (packet framing)."""

    port: int | None = Field(default=None, ge=1, le=65535)
    """Server port (packet framing)."""

    socket_path: str | None = None
    """Unix domain socket path (named-pipe framing)."""

    service: str | None = None
    """Service name every request is wrapped with (named-pipe framing)."""

    max_frame_size: int | None = Field(default=None, gt=0, le=NAMED_PIPE_MAX_FRAME_SIZE)
    """Largest frame accepted in either direction. None picks the framing default."""

    connect_timeout: float | None = Field(default=None, gt=0)
    """Seconds to wait for the connection. Calls themselves never time out."""

    @model_validator(mode="after")
    def validate_endpoint(self) -> Self:
        """Ensure the fields required by the chosen framing are set."""
        if self.framing is FramingMode.PACKET:
            if not self.host or self.port is None:
                raise ValueError("packet framing requires 'host' and 'port'")
            if self.max_frame_size is not None and self.max_frame_size > PACKET_MAX_FRAME_SIZE:
                raise ValueError(
                    f"packet framing cannot carry frames above {PACKET_MAX_FRAME_SIZE} bytes"
                )
        else:
            if not self.socket_path:
                raise ValueError("named-pipe framing requires 'socket_path'")
            if not self.service:
                raise ValueError("named-pipe framing requires 'service'")
        return self

    def effective_max_frame_size(self) -> int:
        """Frame cap the transport will enforce."""
        if self.max_frame_size is not None:
            return self.max_frame_size
        if self.framing is FramingMode.PACKET:
            return PACKET_MAX_FRAME_SIZE
        return DEFAULT_MAX_FRAME_SIZE
