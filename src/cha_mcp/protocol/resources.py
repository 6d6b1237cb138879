"""MCP resources/list and resources/read handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from cha_mcp.plugins.registry import CapabilityRegistry, ResourceNotFoundError, ResourceReadError
from cha_mcp.protocol.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    JsonRpcError,
)


@dataclass
class ResourcesListResult:
    """Result of resources/list request."""

    resources: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        return {"resources": self.resources}


@dataclass
class ResourcesReadResult:
    """Result of resources/read request."""

    contents: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        return {"contents": self.contents}


class ResourcesHandler:
    """Handles resources/list and resources/read MCP requests."""

    def __init__(self, registry: CapabilityRegistry) -> None:
        self._registry = registry

    def handle_list(self) -> ResourcesListResult:
        return ResourcesListResult(resources=self._registry.list_resources())

    def handle_read(self, params: dict[str, Any]) -> ResourcesReadResult:
        """Handle resources/read request.

        Args:
            params: Request params carrying ``uri``.

        Raises:
            JsonRpcError: If the uri is missing or unknown, or reading failed.
        """
        uri = params.get("uri")
        if not uri:
            raise JsonRpcError(INVALID_PARAMS, "Missing required parameter: uri")
        if not isinstance(uri, str):
            raise JsonRpcError(INVALID_REQUEST, f"Resource not found: {uri}")

        try:
            result = self._registry.read_resource(uri)
        except ResourceNotFoundError:
            raise JsonRpcError(INVALID_REQUEST, f"Resource not found: {uri}") from None
        except ResourceReadError as e:
            raise JsonRpcError(INTERNAL_ERROR, str(e)) from e

        return ResourcesReadResult(contents=result.contents)
