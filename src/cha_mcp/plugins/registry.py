"""Capability registry - indexes plugin tools and resources.

Built once at startup from a list of plugins and read-only afterwards, so the
server can share it without locking.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

from cha_mcp.plugins.base import (
    PluginBase,
    ResourceDefinition,
    ResourceResult,
    ToolDefinition,
    ToolResult,
)


class RegistryError(Exception):
    """Raised when plugins cannot be combined into a registry."""

    pass


class ToolNotFoundError(Exception):
    """Raised when a tool is not found."""

    pass


class ResourceNotFoundError(Exception):
    """Raised when a resource is not found."""

    pass


class ToolExecutionError(Exception):
    """Raised when a tool fails to execute."""

    pass


class ResourceReadError(Exception):
    """Raised when a resource fails to read."""

    pass


@dataclass(frozen=True)
class _Entry:
    definition: Any
    plugin: PluginBase


class CapabilityRegistry:
    """Immutable index of tools and resources, keyed by name and URI."""

    def __init__(
        self,
        plugins: tuple[PluginBase, ...],
        tools: Mapping[str, _Entry],
        resources: Mapping[str, _Entry],
    ) -> None:
        self._plugins = plugins
        self._tools = MappingProxyType(dict(tools))
        self._resources = MappingProxyType(dict(resources))

    @classmethod
    def from_plugins(cls, plugins: Iterable[PluginBase]) -> CapabilityRegistry:
        """Index the tools and resources of the given plugins.

        Args:
            plugins: Plugins in registration order.

        Returns:
            A registry listing entries in that order.

        Raises:
            RegistryError: On duplicate names/URIs or an invalid input schema.
        """
        plugins = tuple(plugins)
        tools: dict[str, _Entry] = {}
        resources: dict[str, _Entry] = {}

        for plugin in plugins:
            for tool in plugin.get_tools():
                if tool.name in tools:
                    raise RegistryError(
                        f"Duplicate tool '{tool.name}' from plugin '{plugin.name}'"
                    )
                try:
                    Draft202012Validator.check_schema(tool.input_schema)
                except SchemaError as e:
                    raise RegistryError(
                        f"Invalid input schema for tool '{tool.name}': {e.message}"
                    ) from e
                tools[tool.name] = _Entry(tool, plugin)

            for resource in plugin.get_resources():
                if resource.uri in resources:
                    raise RegistryError(
                        f"Duplicate resource '{resource.uri}' from plugin '{plugin.name}'"
                    )
                resources[resource.uri] = _Entry(resource, plugin)

        return cls(plugins, tools, resources)

    @property
    def plugins(self) -> tuple[PluginBase, ...]:
        return self._plugins

    def list_tools(self) -> list[dict[str, Any]]:
        """List all tools in MCP format (handlers withheld)."""
        return [entry.definition.to_dict() for entry in self._tools.values()]

    def list_resources(self) -> list[dict[str, Any]]:
        """List all resources in MCP format (readers withheld)."""
        return [entry.definition.to_dict() for entry in self._resources.values()]

    def get_tool(self, tool_name: str) -> ToolDefinition | None:
        entry = self._tools.get(tool_name)
        return entry.definition if entry else None

    def get_resource(self, uri: str) -> ResourceDefinition | None:
        entry = self._resources.get(uri)
        return entry.definition if entry else None

    def call_tool(self, tool_name: str, arguments: dict[str, Any]) -> ToolResult:
        """Call a tool by name.

        Args:
            tool_name: Name of the tool to call.
            arguments: Arguments to pass to the tool.

        Returns:
            ToolResult from the tool execution.

        Raises:
            ToolNotFoundError: If the tool is not registered.
            ToolExecutionError: If the tool fails to execute.
        """
        entry = self._tools.get(tool_name)
        if entry is None:
            raise ToolNotFoundError(f"Tool not found: {tool_name}")

        try:
            return entry.plugin.execute(tool_name, arguments)
        except Exception as e:
            raise ToolExecutionError(f"Tool execution failed: {tool_name}") from e

    def read_resource(self, uri: str) -> ResourceResult:
        """Read a resource by URI.

        Raises:
            ResourceNotFoundError: If the resource is not registered.
            ResourceReadError: If the plugin fails to read it.
        """
        entry = self._resources.get(uri)
        if entry is None:
            raise ResourceNotFoundError(f"Resource not found: {uri}")

        try:
            return entry.plugin.read_resource(uri)
        except Exception as e:
            raise ResourceReadError(f"Resource read failed: {uri}") from e

    def cleanup(self) -> None:
        """Call cleanup() on each plugin to release resources."""
        for plugin in self._plugins:
            plugin.cleanup()
