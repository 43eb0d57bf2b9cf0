"""Transport interfaces (protocols).

A transport is a connected byte stream that sends and receives whole
messages using one framing policy. Blocking and asyncio implementations
satisfy separate protocols with the same operations, so a client for
either execution mode depends only on the capability, not on a class.
"""

from typing import Protocol, runtime_checkable

from searpc_client.transport.framing import FramingPolicy


@runtime_checkable
class MessageTransport(Protocol):
    """Blocking message transport.

    Example:
        class EchoTransport:
            def send(self, message: bytes) -> None:
                self._last = message

            def receive(self) -> bytes:
                return self._last
    """

    framing: FramingPolicy

    def send(self, message: bytes) -> None:
        """Write exactly one frame carrying an encoded request.

        Raises:
            TransportError: On I/O failure or if the message does not fit the framing.
        """
        ...

    def receive(self) -> bytes:
        """Block until one complete frame arrives and return its payload.

        Raises:
            TransportError: On I/O failure, premature close or a bad length prefix.
        """
        ...

    def close(self) -> None:
        """Close the underlying stream."""
        ...


@runtime_checkable
class AsyncMessageTransport(Protocol):
    """Asyncio message transport.

    Control may suspend only inside ``send`` and ``receive``. A transport
    whose send or receive was cancelled must not be used again.
    """

    framing: FramingPolicy

    async def send(self, message: bytes) -> None:
        """Write exactly one frame carrying an encoded request."""
        ...

    async def receive(self) -> bytes:
        """Wait until one complete frame arrives and return its payload."""
        ...

    async def close(self) -> None:
        """Close the underlying stream."""
        ...
