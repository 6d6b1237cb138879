"""MCP Server - request routing.

Integrates the lifecycle manager, the tool and resource handlers and the
capability registry behind an explicit method table.
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from typing import Any

from cha_mcp.audit import AuditLogger
from cha_mcp.config import ServerConfig
from cha_mcp.plugins.registry import CapabilityRegistry
from cha_mcp.plugins.teas import TeaCatalogPlugin, load_catalog
from cha_mcp.protocol.jsonrpc import (
    INVALID_REQUEST,
    JsonRpcError,
    JsonRpcErrorResponse,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    parse_message,
)
from cha_mcp.protocol.lifecycle import LifecycleManager, ProtocolError
from cha_mcp.protocol.resources import ResourcesHandler
from cha_mcp.protocol.tools import ToolsHandler
from cha_mcp.protocol.transport import Logger, StdioTransport

Reply = JsonRpcResponse | JsonRpcErrorResponse
Route = Callable[[dict[str, Any]], dict[str, Any]]

# Methods answered even before the handshake completes in strict mode
PRE_INIT_METHODS = frozenset({"initialize", "ping"})
AUDITED_METHODS = {"tools/call": "name", "resources/read": "uri"}


class Unhandled:
    """Routing outcome for methods outside the table; produces no reply."""

    def __repr__(self) -> str:
        return "UNHANDLED"


UNHANDLED = Unhandled()


def _ignore(_: str) -> None:
    pass


class MCPServer:
    """MCP Server implementation.

    Handles, one document at a time:
    - Lifecycle (initialize, notifications/initialized, ping)
    - Resource listing and reading
    - Tool listing and execution

    Documents that are not JSON-RPC 2.0 and requests for unknown methods are
    dropped without a reply.
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        config: ServerConfig | None = None,
        log: Logger | None = None,
        audit: AuditLogger | None = None,
    ) -> None:
        """Initialize the server.

        Args:
            registry: Tools and resources to serve.
            config: Server configuration (defaults apply if omitted).
            log: Diagnostic callback.
            audit: Optional audit logger for tool calls and resource reads.
        """
        self._config = config or ServerConfig()
        self._registry = registry
        self._log = log or _ignore
        self._audit = audit

        self._lifecycle = LifecycleManager(
            server_info=self._config.server_info,
            protocol_version=self._config.protocol_version,
            strict=self._config.strict_lifecycle,
        )
        self._tools_handler = ToolsHandler(registry)
        self._resources_handler = ResourcesHandler(registry)

        self._routes: dict[str, Route] = {
            "initialize": self._lifecycle.handle_initialize,
            "ping": lambda _params: {},
            "resources/list": lambda _params: self._resources_handler.handle_list().to_dict(),
            "resources/read": lambda params: self._resources_handler.handle_read(params).to_dict(),
            "tools/list": lambda _params: self._tools_handler.handle_list().to_dict(),
            "tools/call": lambda params: self._tools_handler.handle_call(params).to_dict(),
        }

    @property
    def lifecycle(self) -> LifecycleManager:
        return self._lifecycle

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    @property
    def methods(self) -> list[str]:
        """Request methods this server answers."""
        return list(self._routes)

    def handle_message(self, raw_message: str) -> str | None:
        """Handle one raw JSON-RPC line.

        Args:
            raw_message: Raw JSON-RPC message string.

        Returns:
            Reply string, or None when no reply is due.
        """
        try:
            data = json.loads(raw_message)
        except json.JSONDecodeError as e:
            self._log(f"Skipping malformed message: {e}")
            return None

        reply = self.dispatch(data)
        if reply is None:
            return None
        return json.dumps(reply.to_dict(), ensure_ascii=False)

    def dispatch(self, data: Any) -> Reply | None:
        """Handle one decoded JSON document.

        Args:
            data: Value produced by the framer.

        Returns:
            The reply to write, or None when no reply is due.
        """
        message = parse_message(data)
        if isinstance(message, JsonRpcNotification):
            self._handle_notification(message)
            return None
        if not isinstance(message, JsonRpcRequest):
            # Not JSON-RPC 2.0, or a stray response: dropped without reply
            return None

        outcome = self.route(message)
        if outcome is UNHANDLED:
            self._log(f"Ignoring unknown method: {message.method}")
            return None
        return outcome

    def route(self, request: JsonRpcRequest) -> Reply | Unhandled:
        """Run a request through the method table.

        Args:
            request: The request to handle.

        Returns:
            The reply, or UNHANDLED if the method is not in the table.
        """
        handler = self._routes.get(request.method)
        if handler is None:
            return UNHANDLED

        params = request.params if isinstance(request.params, dict) else {}
        started = time.perf_counter()
        try:
            if request.method not in PRE_INIT_METHODS:
                self._lifecycle.require_ready()
            reply: Reply = JsonRpcResponse(request.id, handler(params))
        except ProtocolError as e:
            reply = JsonRpcErrorResponse(request.id, INVALID_REQUEST, str(e))
        except JsonRpcError as e:
            reply = JsonRpcErrorResponse(request.id, e.code, e.message, e.data)

        if isinstance(reply, JsonRpcErrorResponse) and reply.code != INVALID_REQUEST:
            self._log(f"{request.method} failed: {reply.message}")
        self._record(request, params, reply, started)
        return reply

    def _handle_notification(self, notification: JsonRpcNotification) -> None:
        """Handle a notification (never answered)."""
        if notification.method == "notifications/initialized":
            try:
                self._lifecycle.handle_initialized()
            except ProtocolError as e:
                self._log(f"Ignoring initialized notification: {e}")
        else:
            self._log(f"Ignoring notification: {notification.method}")

    def _record(
        self,
        request: JsonRpcRequest,
        params: dict[str, Any],
        reply: Reply,
        started: float,
    ) -> None:
        key = AUDITED_METHODS.get(request.method)
        if self._audit is None or key is None:
            return
        arguments = params.get("arguments") if request.method == "tools/call" else None
        self._audit.log_call(
            request_id=request.id,
            method=request.method,
            target=str(params.get(key, "")),
            arguments=arguments if isinstance(arguments, dict) else {},
            status="error" if isinstance(reply, JsonRpcErrorResponse) else "success",
            duration_ms=(time.perf_counter() - started) * 1000,
        )

    def serve(self, transport: StdioTransport) -> None:
        """Answer requests until the inbound stream ends.

        Each document is handled to completion, and its reply written, before
        the next line is read.

        Args:
            transport: Transport connected to the client.
        """
        for data in transport.messages():
            reply = self.dispatch(data)
            if reply is not None:
                transport.write_message(reply)
        self._lifecycle.handle_close()

    def close(self) -> None:
        """Close the server and clean up resources."""
        self._registry.cleanup()
        if self._audit is not None:
            self._audit.close()

    def __enter__(self) -> MCPServer:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


def create_server(config: ServerConfig | None = None, log: Logger | None = None) -> MCPServer:
    """Build a server with the tea catalog plugin from configuration.

    Raises:
        CatalogLoadError: If the configured catalog cannot be loaded.
        RegistryError: If the plugins conflict.
    """
    config = config or ServerConfig()
    registry = CapabilityRegistry.from_plugins([TeaCatalogPlugin(load_catalog(config.catalog_path))])
    audit = AuditLogger(config.audit_log_file) if config.audit_log_file else None
    return MCPServer(registry, config=config, log=log, audit=audit)
