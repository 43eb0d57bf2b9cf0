"""searpc clients: blocking and asyncio.

Both clients perform one request/response round trip per call and decode
``ret`` according to the call-kind. The protocol has no request ids, so a
connection carries exactly one outstanding call; a second call issued
before the first completes raises ClientBusyError instead of queueing.
"""

import logging
import threading
from collections.abc import Iterable
from typing import Any

from searpc_client.core.errors import ClientBusyError
from searpc_client.core.values import Value
from searpc_client.rpc.protocol import decode_response, encode_request
from searpc_client.rpc.results import CallKind, decode_result
from searpc_client.transport.base import AsyncMessageTransport, MessageTransport

logger = logging.getLogger(__name__)


def _encode_call(function_name: str, values: Iterable[Any]) -> bytes:
    """Encode a call, converting plain Python arguments with Value.from_python."""
    return encode_request(function_name, [Value.from_python(v) for v in values])


def _decode_reply(kind: CallKind, payload: bytes, nullable: bool) -> Any:
    """Decode a response frame: errors first, then the call-kind's ret rules."""
    response = decode_response(payload)
    response.raise_for_error()
    return decode_result(kind, response.ret, nullable)


class SearpcClient:
    """Blocking searpc client.

    Usage:
        transport = SocketTransport.connect_tcp("127.0.0.1", 12345)
        with SearpcClient(transport) as client:
            length = client.call_int("searpc_strlen", [Value.string("hello")])
    """

    def __init__(self, transport: MessageTransport) -> None:
        """Initialize the client.

        Args:
            transport: Connected transport. The client owns it from now on.
        """
        self._transport = transport
        self._busy = threading.Lock()

    @property
    def transport(self) -> MessageTransport:
        return self._transport

    def call_kind(
        self,
        kind: CallKind,
        function_name: str,
        values: Iterable[Any] = (),
        nullable: bool = False,
    ) -> Any:
        """Perform one round trip and decode ``ret`` for ``kind``.

        Args:
            kind: Call-kind of the server function.
            function_name: Server function name.
            values: Arguments, as Values or plain Python objects.
            nullable: Return None for a null ``ret`` instead of type-checking it.

        Raises:
            RpcError: The server reported an error.
            TransportError: The connection failed; it must not be reused.
            DecodeError: The response frame was malformed.
            ResultTypeError: ``ret`` does not match ``kind``.
            ClientBusyError: Another call is in flight on this client.
        """
        payload = _encode_call(function_name, values)
        if not self._busy.acquire(blocking=False):
            raise ClientBusyError(f"Call to {function_name!r} issued while another call is in flight")
        try:
            logger.debug("RPC call: function=%s, kind=%s", function_name, kind.value)
            self._transport.send(payload)
            reply = self._transport.receive()
        finally:
            self._busy.release()
        return _decode_reply(kind, reply, nullable)

    def call(self, function_name: str, values: Iterable[Any] = ()) -> Any:
        """Round trip returning the raw ``ret`` value after the error check."""
        return self.call_kind(CallKind.JSON, function_name, values)

    def call_int(self, function_name: str, values: Iterable[Any] = (), nullable: bool = False) -> int:
        return self.call_kind(CallKind.INT, function_name, values, nullable)

    def call_int64(
        self, function_name: str, values: Iterable[Any] = (), nullable: bool = False
    ) -> int:
        return self.call_kind(CallKind.INT64, function_name, values, nullable)

    def call_string(
        self, function_name: str, values: Iterable[Any] = (), nullable: bool = False
    ) -> str:
        return self.call_kind(CallKind.STRING, function_name, values, nullable)

    def call_object(self, function_name: str, values: Iterable[Any] = ()) -> dict[str, Any] | None:
        """Call a function returning one object. A null ``ret`` gives None."""
        return self.call_kind(CallKind.OBJECT, function_name, values)

    def call_objlist(self, function_name: str, values: Iterable[Any] = ()) -> list[Any]:
        """Call a function returning a list of objects. A null ``ret`` gives []."""
        return self.call_kind(CallKind.OBJLIST, function_name, values)

    def call_json(self, function_name: str, values: Iterable[Any] = ()) -> Any:
        return self.call_kind(CallKind.JSON, function_name, values)

    def close(self) -> None:
        """Close the underlying transport."""
        self._transport.close()

    def __enter__(self) -> "SearpcClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class AsyncSearpcClient:
    """Asyncio searpc client with the same operations as SearpcClient.

    A response is decoded only after its whole frame has arrived. If a call
    is cancelled the transport becomes unusable and the client must be
    rebuilt over a new connection.

    Usage:
        transport = await StreamTransport.open_unix(path, "seafile-rpcserver")
        async with AsyncSearpcClient(transport) as client:
            repos = await client.call_objlist("seafile_get_repo_list", [-1, -1])
    """

    def __init__(self, transport: AsyncMessageTransport) -> None:
        """Initialize the client.

        Args:
            transport: Connected asyncio transport. The client owns it from now on.
        """
        self._transport = transport
        self._in_flight = False

    @property
    def transport(self) -> AsyncMessageTransport:
        return self._transport

    async def call_kind(
        self,
        kind: CallKind,
        function_name: str,
        values: Iterable[Any] = (),
        nullable: bool = False,
    ) -> Any:
        """Perform one round trip and decode ``ret`` for ``kind``.

        Raises the same errors as SearpcClient.call_kind.
        """
        payload = _encode_call(function_name, values)
        # Single event loop thread: check-and-set cannot interleave
        if self._in_flight:
            raise ClientBusyError(f"Call to {function_name!r} issued while another call is in flight")
        self._in_flight = True
        try:
            logger.debug("RPC call: function=%s, kind=%s", function_name, kind.value)
            await self._transport.send(payload)
            reply = await self._transport.receive()
        finally:
            self._in_flight = False
        return _decode_reply(kind, reply, nullable)

    async def call(self, function_name: str, values: Iterable[Any] = ()) -> Any:
        """Round trip returning the raw ``ret`` value after the error check."""
        return await self.call_kind(CallKind.JSON, function_name, values)

    async def call_int(
        self, function_name: str, values: Iterable[Any] = (), nullable: bool = False
    ) -> int:
        return await self.call_kind(CallKind.INT, function_name, values, nullable)

    async def call_int64(
        self, function_name: str, values: Iterable[Any] = (), nullable: bool = False
    ) -> int:
        return await self.call_kind(CallKind.INT64, function_name, values, nullable)

    async def call_string(
        self, function_name: str, values: Iterable[Any] = (), nullable: bool = False
    ) -> str:
        return await self.call_kind(CallKind.STRING, function_name, values, nullable)

    async def call_object(
        self, function_name: str, values: Iterable[Any] = ()
    ) -> dict[str, Any] | None:
        """Call a function returning one object. A null ``ret`` gives None."""
        return await self.call_kind(CallKind.OBJECT, function_name, values)

    async def call_objlist(self, function_name: str, values: Iterable[Any] = ()) -> list[Any]:
        """Call a function returning a list of objects. A null ``ret`` gives []."""
        return await self.call_kind(CallKind.OBJLIST, function_name, values)

    async def call_json(self, function_name: str, values: Iterable[Any] = ()) -> Any:
        return await self.call_kind(CallKind.JSON, function_name, values)

    async def close(self) -> None:
        """Close the underlying transport."""
        await self._transport.close()

    async def __aenter__(self) -> "AsyncSearpcClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
