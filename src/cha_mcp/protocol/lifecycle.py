"""MCP lifecycle management.

Handles the initialize/initialized handshake and tracks connection state.
Negotiation is lenient: the server always answers with its own protocol
version and leaves it to the client to decide whether to continue.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Version advertised to clients (inspector compatible)
MCP_PROTOCOL_VERSION = "2024-11-05"


def default_capabilities() -> dict[str, Any]:
    """Capability groups advertised by the server."""
    return {
        "resources": {"listChanged": True},
        "tools": {"listChanged": True},
    }


class LifecycleState(Enum):
    """MCP connection lifecycle states."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    CLOSED = "closed"


class ProtocolError(Exception):
    """Raised when protocol constraints are violated."""

    pass


@dataclass
class LifecycleManager:
    """Tracks the server side of the MCP handshake.

    State is always recorded. Ordering is only enforced when ``strict`` is
    set; otherwise calls before ``initialize`` and repeated ``initialize``
    requests are answered normally.
    """

    server_info: dict[str, str] = field(
        default_factory=lambda: {"name": "茶", "version": "0.1.0"}
    )
    capabilities: dict[str, Any] = field(default_factory=default_capabilities)
    protocol_version: str = MCP_PROTOCOL_VERSION
    strict: bool = False
    state: LifecycleState = LifecycleState.UNINITIALIZED
    client_info: dict[str, Any] | None = None
    client_capabilities: dict[str, Any] | None = None
    requested_version: str | None = None

    @property
    def is_ready(self) -> bool:
        """Check if the connection is ready for operations."""
        return self.state == LifecycleState.READY

    def require_ready(self) -> None:
        """Assert that the connection is ready (strict mode only).

        Raises:
            ProtocolError: If strict and not ready for operations.
        """
        if not self.strict:
            return
        if self.state == LifecycleState.CLOSED:
            raise ProtocolError("Connection is closed")
        if self.state != LifecycleState.READY:
            raise ProtocolError("Connection is not ready")

    def handle_initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle initialize request.

        Args:
            params: Initialize request parameters.

        Returns:
            Initialize response result.

        Raises:
            ProtocolError: In strict mode, if already initialized.
        """
        if self.strict and self.state != LifecycleState.UNINITIALIZED:
            raise ProtocolError("Server already initialized")

        requested = params.get("protocolVersion")
        self.requested_version = requested if isinstance(requested, str) else None
        client_info = params.get("clientInfo")
        self.client_info = client_info if isinstance(client_info, dict) else None
        client_caps = params.get("capabilities")
        self.client_capabilities = client_caps if isinstance(client_caps, dict) else {}

        if self.state == LifecycleState.UNINITIALIZED:
            self.state = LifecycleState.INITIALIZING

        return {
            "protocolVersion": self.protocol_version,
            "capabilities": self.capabilities,
            "serverInfo": self.server_info,
        }

    def handle_initialized(self) -> None:
        """Handle the initialized notification.

        Raises:
            ProtocolError: In strict mode, if not in the initializing state.
        """
        if self.strict and self.state != LifecycleState.INITIALIZING:
            raise ProtocolError("Server not initializing")
        if self.state != LifecycleState.CLOSED:
            self.state = LifecycleState.READY

    def handle_close(self) -> None:
        """Mark the connection as closed (stream ended)."""
        self.state = LifecycleState.CLOSED
