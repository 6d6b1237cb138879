"""Plugin system for MCP tools and resources."""

from cha_mcp.plugins.base import (
    PluginBase,
    ResourceDefinition,
    ResourceResult,
    ToolDefinition,
    ToolResult,
)
from cha_mcp.plugins.registry import (
    CapabilityRegistry,
    RegistryError,
    ResourceNotFoundError,
    ResourceReadError,
    ToolExecutionError,
    ToolNotFoundError,
)
from cha_mcp.plugins.teas import CatalogLoadError, Tea, TeaCatalogPlugin, load_catalog

__all__ = [
    "CapabilityRegistry",
    "CatalogLoadError",
    "PluginBase",
    "RegistryError",
    "ResourceDefinition",
    "ResourceNotFoundError",
    "ResourceReadError",
    "ResourceResult",
    "Tea",
    "TeaCatalogPlugin",
    "ToolDefinition",
    "ToolExecutionError",
    "ToolNotFoundError",
    "ToolResult",
    "load_catalog",
]
