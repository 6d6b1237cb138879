"""Request/response correlation for the client side of a connection.

Requests are numbered from 0 and replies are matched to their pending call
by ``id``. The server answers in order, so in practice the next reply is the
one being waited for, but nothing here depends on that.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from cha_mcp.protocol.jsonrpc import (
    JsonRpcErrorResponse,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    parse_message,
)
from cha_mcp.protocol.transport import StdioTransport


class ConnectionClosed(ConnectionError):
    """Raised when the stream ends before a reply arrives."""


_UNSET = object()


@dataclass
class PendingCall:
    """A request that has been written and awaits its reply."""

    id: int
    method: str
    result: Any = field(default=_UNSET, repr=False)
    error: Exception | None = None

    @property
    def done(self) -> bool:
        return self.error is not None or self.result is not _UNSET

    def outcome(self) -> Any:
        """Return the result, or raise the error the call completed with."""
        if self.error is not None:
            raise self.error
        if self.result is _UNSET:
            raise RuntimeError(f"Call {self.id} ({self.method}) has not completed")
        return self.result


class Correlator:
    """Issues requests over a transport and pairs replies with callers."""

    def __init__(self, transport: StdioTransport) -> None:
        """Initialize the correlator.

        Args:
            transport: Transport connected to the server.
        """
        self._transport = transport
        self._inbound: Iterator[Any] = transport.messages()
        self._pending: dict[int, PendingCall] = {}
        self._next_id = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> list[PendingCall]:
        """Calls still waiting for a reply, oldest first."""
        return list(self._pending.values())

    def call(self, method: str, params: Any | None = None) -> Any:
        """Send a request and block until its reply arrives.

        Args:
            method: Method name.
            params: Optional parameters.

        Returns:
            The ``result`` of the reply.

        Raises:
            JsonRpcError: If the server answered with an error.
            ConnectionClosed: If the stream ended first.
        """
        return self.wait(self.send_request(method, params))

    def send_request(self, method: str, params: Any | None = None) -> PendingCall:
        """Write a request without waiting for the reply.

        Returns:
            The pending call, to be passed to :meth:`wait`.
        """
        if self._closed:
            raise ConnectionClosed("Connection is closed")

        pending = PendingCall(id=self._next_id, method=method)
        # ids are consumed even if the write below fails
        self._next_id += 1
        self._pending[pending.id] = pending
        try:
            self._transport.write_message(JsonRpcRequest(pending.id, method, params))
        except (OSError, ValueError) as e:
            self._fail_all(ConnectionClosed(f"Write failed: {e}"))
        return pending

    def notify(self, method: str, params: Any | None = None) -> None:
        """Write a notification; no reply is expected."""
        if self._closed:
            raise ConnectionClosed("Connection is closed")
        try:
            self._transport.write_message(JsonRpcNotification(method, params))
        except (OSError, ValueError) as e:
            self._fail_all(ConnectionClosed(f"Write failed: {e}"))
            raise ConnectionClosed(f"Write failed: {e}") from e

    def wait(self, pending: PendingCall) -> Any:
        """Read inbound documents until ``pending`` completes."""
        while not pending.done:
            try:
                data = next(self._inbound)
            except StopIteration:
                self._fail_all(ConnectionClosed("Connection closed before reply"))
                break
            self._deliver(data)
        return pending.outcome()

    def _deliver(self, data: Any) -> None:
        message = parse_message(data)
        if isinstance(message, (JsonRpcResponse, JsonRpcErrorResponse)):
            pending = self._pending.pop(message.id, None) if message.id is not None else None
            if pending is None:
                self._transport.log(f"Dropping reply for unknown id: {message.id!r}")
            elif isinstance(message, JsonRpcErrorResponse):
                pending.error = message.to_exception()
            else:
                pending.result = message.result
        elif isinstance(message, (JsonRpcNotification, JsonRpcRequest)):
            self._transport.log(f"Ignoring server message: {message.method}")
        else:
            self._transport.log("Ignoring non JSON-RPC document")

    def _fail_all(self, error: ConnectionClosed) -> None:
        self._closed = True
        for pending in self._pending.values():
            pending.error = error
        self._pending.clear()

