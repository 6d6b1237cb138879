"""Tea catalog MCP server and stdio client."""

__version__ = "0.1.0"
