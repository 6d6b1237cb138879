"""Plugin base class and data structures.

Defines the interface that all plugins must implement. A plugin contributes
tools (invokable by name) and, optionally, resources (readable by URI).
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


def text_content(text: str) -> dict[str, Any]:
    """Build a single inline text content item."""
    return {"type": "text", "text": text}


def json_content(payload: Any) -> dict[str, Any]:
    """Build a text content item carrying a JSON-serialized payload."""
    return text_content(json.dumps(payload, ensure_ascii=False))


@dataclass(frozen=True)
class ToolDefinition:
    """Definition of a tool provided by a plugin."""

    name: str
    description: str
    input_schema: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP tool format.

        Returns:
            Dictionary in MCP tools/list format.
        """
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass(frozen=True)
class ResourceDefinition:
    """Definition of a read-only resource provided by a plugin."""

    uri: str
    name: str
    description: str
    mime_type: str = "application/json"

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP resources/list format."""
        return {
            "uri": self.uri,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
        }


@dataclass
class ToolResult:
    """Result of a tool execution.

    Application-level problems (bad argument values, no matches) are ordinary
    content; they are not protocol errors.
    """

    content: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP result format.

        Returns:
            Dictionary in MCP tools/call result format.
        """
        return {"content": self.content}


@dataclass
class ResourceResult:
    """Contents produced by reading a resource."""

    contents: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP resources/read result format."""
        return {"contents": self.contents}


class PluginBase(ABC):
    """Abstract base class for all plugins.

    Plugins must implement this interface to provide tools
    to the MCP server. Resources are optional.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the plugin identifier."""
        pass

    @property
    @abstractmethod
    def version(self) -> str:
        """Return the plugin version."""
        pass

    @abstractmethod
    def get_tools(self) -> list[ToolDefinition]:
        """Return tool definitions provided by this plugin.

        Returns:
            List of ToolDefinition objects.
        """
        pass

    @abstractmethod
    def execute(self, tool_name: str, arguments: dict[str, Any]) -> ToolResult:
        """Execute a tool.

        Args:
            tool_name: Name of the tool to execute.
            arguments: Tool arguments.

        Returns:
            ToolResult with content.
        """
        pass

    def get_resources(self) -> list[ResourceDefinition]:
        """Return resource definitions provided by this plugin."""
        return []

    def read_resource(self, uri: str) -> ResourceResult:
        """Read one of this plugin's resources.

        Args:
            uri: URI of a resource returned by get_resources().

        Returns:
            ResourceResult with the resource contents.
        """
        raise NotImplementedError(f"{self.name} does not provide resources")

    def cleanup(self) -> None:
        """Release any resources held by the plugin."""
