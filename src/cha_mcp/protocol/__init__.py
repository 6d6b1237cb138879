"""MCP protocol layer for JSON-RPC communication."""

from cha_mcp.protocol.correlator import ConnectionClosed, Correlator, PendingCall
from cha_mcp.protocol.jsonrpc import (
    JsonRpcError,
    JsonRpcErrorResponse,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    Message,
    parse_message,
)
from cha_mcp.protocol.lifecycle import (
    MCP_PROTOCOL_VERSION,
    LifecycleManager,
    LifecycleState,
    ProtocolError,
)
from cha_mcp.protocol.resources import ResourcesHandler, ResourcesListResult, ResourcesReadResult
from cha_mcp.protocol.tools import ToolsCallResult, ToolsHandler, ToolsListResult
from cha_mcp.protocol.transport import StdioTransport, decode, encode

__all__ = [
    "ConnectionClosed",
    "Correlator",
    "JsonRpcError",
    "JsonRpcErrorResponse",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "LifecycleManager",
    "LifecycleState",
    "MCP_PROTOCOL_VERSION",
    "Message",
    "PendingCall",
    "ProtocolError",
    "ResourcesHandler",
    "ResourcesListResult",
    "ResourcesReadResult",
    "StdioTransport",
    "ToolsCallResult",
    "ToolsHandler",
    "ToolsListResult",
    "decode",
    "encode",
    "parse_message",
]
