"""Unit tests for framing policies."""

import json
import struct

import pytest

from searpc_client.core.errors import FrameSizeError
from searpc_client.transport.framing import (
    DEFAULT_MAX_FRAME_SIZE,
    NAMED_PIPE_MAX_FRAME_SIZE,
    PACKET_MAX_FRAME_SIZE,
    NamedPipeFraming,
    PacketFraming,
)


class TestPacketFraming:
    """Tests for the 16-bit big-endian framing."""

    def test_header(self):
        framing = PacketFraming()
        assert framing.header_size == 2
        assert framing.pack_header(0x0102) == b"\x01\x02"

    def test_encode_frame(self):
        frame = PacketFraming().encode_frame(b'["get_version"]')
        assert frame == b"\x00\x0f" + b'["get_version"]'

    def test_default_cap(self):
        assert PacketFraming().max_frame_size == PACKET_MAX_FRAME_SIZE

    def test_largest_payload(self):
        frame = PacketFraming().encode_frame(b"x" * PACKET_MAX_FRAME_SIZE)
        assert frame[:2] == b"\xff\xff"

    def test_oversized_payload(self):
        with pytest.raises(FrameSizeError) as exc_info:
            PacketFraming().encode_frame(b"x" * (PACKET_MAX_FRAME_SIZE + 1))
        assert exc_info.value.direction == "outgoing"
        assert exc_info.value.limit == PACKET_MAX_FRAME_SIZE

    def test_cap_above_limit_rejected(self):
        with pytest.raises(ValueError):
            PacketFraming(PACKET_MAX_FRAME_SIZE + 1)

    def test_zero_length_incoming(self):
        with pytest.raises(FrameSizeError, match="zero length"):
            PacketFraming().unpack_header(b"\x00\x00")

    def test_custom_cap_incoming(self):
        with pytest.raises(FrameSizeError, match="too large"):
            PacketFraming(100).unpack_header(struct.pack(">H", 101))


class TestNamedPipeFraming:
    """Tests for the 32-bit native-endian framing with service wrapping."""

    def test_header_is_native_u32(self):
        framing = NamedPipeFraming("svc")
        assert framing.header_size == 4
        assert framing.pack_header(1234) == struct.pack("=I", 1234)

    def test_outgoing_is_wrapped(self):
        frame = NamedPipeFraming("seafile-rpcserver").encode_frame(b'["seafile_shutdown"]')
        (length,) = struct.unpack("=I", frame[:4])
        body = frame[4:]

        assert length == len(body)
        assert json.loads(body) == {
            "service": "seafile-rpcserver",
            "request": '["seafile_shutdown"]',
        }

    def test_default_cap(self):
        assert NamedPipeFraming("svc").max_frame_size == DEFAULT_MAX_FRAME_SIZE

    def test_cap_up_to_hard_limit(self):
        framing = NamedPipeFraming("svc", NAMED_PIPE_MAX_FRAME_SIZE)
        assert framing.max_frame_size == NAMED_PIPE_MAX_FRAME_SIZE

    def test_oversized_incoming(self):
        framing = NamedPipeFraming("svc", 1024)
        with pytest.raises(FrameSizeError) as exc_info:
            framing.unpack_header(struct.pack("=I", 1025))
        assert exc_info.value.direction == "incoming"

    def test_empty_service_rejected(self):
        with pytest.raises(ValueError, match="service"):
            NamedPipeFraming("")

    def test_wrapping_counts_toward_cap(self):
        """The cap applies to the wrapped body, not the bare request."""
        request = b'["f"]'
        wrapped_size = len(NamedPipeFraming("svc").prepare_outgoing(request))
        with pytest.raises(FrameSizeError):
            NamedPipeFraming("svc", wrapped_size - 1).encode_frame(request)
