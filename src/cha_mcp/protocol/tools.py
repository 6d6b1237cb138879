"""MCP tools/list and tools/call handlers.

Handles tool-related MCP requests, routing them through the capability
registry. Protocol problems (missing name, unknown tool, crashing plugin) are
raised as JsonRpcError; anything the tool itself reports is returned as
ordinary content.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from cha_mcp.plugins.registry import CapabilityRegistry, ToolExecutionError, ToolNotFoundError
from cha_mcp.protocol.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    JsonRpcError,
)


@dataclass
class ToolsListResult:
    """Result of tools/list request."""

    tools: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP result format."""
        return {"tools": self.tools}


@dataclass
class ToolsCallResult:
    """Result of tools/call request."""

    content: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP result format."""
        return {"content": self.content}


class ToolsHandler:
    """Handles tools/list and tools/call MCP requests."""

    def __init__(self, registry: CapabilityRegistry) -> None:
        """Initialize the handler.

        Args:
            registry: Registry holding the available tools.
        """
        self._registry = registry

    def handle_list(self) -> ToolsListResult:
        """Handle tools/list request.

        Returns:
            ToolsListResult with all available tools.
        """
        return ToolsListResult(tools=self._registry.list_tools())

    def handle_call(self, params: dict[str, Any]) -> ToolsCallResult:
        """Handle tools/call request.

        Args:
            params: Request params carrying ``name`` and optional ``arguments``.

        Returns:
            ToolsCallResult with the tool's content.

        Raises:
            JsonRpcError: If the name is missing or unknown, or the tool crashed.
        """
        name = params.get("name")
        if not name:
            raise JsonRpcError(INVALID_PARAMS, "Missing required parameter: name")
        if not isinstance(name, str):
            raise JsonRpcError(INVALID_REQUEST, f"Tool not found: {name}")

        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            raise JsonRpcError(INVALID_PARAMS, "Invalid parameter: arguments must be an object")

        try:
            result = self._registry.call_tool(name, arguments)
        except ToolNotFoundError:
            raise JsonRpcError(INVALID_REQUEST, f"Tool not found: {name}") from None
        except ToolExecutionError as e:
            raise JsonRpcError(INTERNAL_ERROR, str(e)) from e

        return ToolsCallResult(content=result.content)
