"""JSON-RPC 2.0 message model, parsing and formatting.

Every document exchanged between client and server is one of four shapes:
request, notification, response or error response. Parsing is lenient about
what it does not understand: anything that is not a JSON-RPC 2.0 object is
reported as ``None`` so callers can drop it without replying.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

JSONRPC_VERSION = "2.0"

# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class JsonRpcError(Exception):
    """JSON-RPC error with code and message."""

    def __init__(self, code: int, message: str, data: Any | None = None) -> None:
        """Initialize the error.

        Args:
            code: JSON-RPC error code.
            message: Human-readable error message.
            data: Optional additional error data.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data


@dataclass
class JsonRpcRequest:
    """A request; always answered by exactly one response or error."""

    id: int | str
    method: str
    params: Any = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": self.id, "method": self.method}
        if self.params is not None:
            data["params"] = self.params
        return data


@dataclass
class JsonRpcNotification:
    """A one-way message (no id, never answered)."""

    method: str
    params: Any = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": self.method}
        if self.params is not None:
            data["params"] = self.params
        return data


@dataclass
class JsonRpcResponse:
    """A successful reply to a request."""

    id: int | str | None
    result: Any

    def to_dict(self) -> dict[str, Any]:
        return {"jsonrpc": JSONRPC_VERSION, "id": self.id, "result": self.result}


@dataclass
class JsonRpcErrorResponse:
    """A failed reply to a request."""

    id: int | str | None
    code: int
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return {"jsonrpc": JSONRPC_VERSION, "id": self.id, "error": error}

    def to_exception(self) -> JsonRpcError:
        return JsonRpcError(self.code, self.message, self.data)


Message = JsonRpcRequest | JsonRpcNotification | JsonRpcResponse | JsonRpcErrorResponse


def _valid_id(value: Any) -> bool:
    # bool is a subclass of int but never a valid id
    return isinstance(value, (int, str)) and not isinstance(value, bool)


def parse_message(data: Any) -> Message | None:
    """Classify a decoded JSON value as a JSON-RPC message.

    Args:
        data: A value produced by the framer (already JSON-decoded).

    Returns:
        The typed message, or None if the value is not a JSON-RPC 2.0
        document this implementation understands.
    """
    if not isinstance(data, dict) or data.get("jsonrpc") != JSONRPC_VERSION:
        return None

    method = data.get("method")
    if isinstance(method, str):
        if "id" in data and data["id"] is not None:
            if not _valid_id(data["id"]):
                return None
            return JsonRpcRequest(id=data["id"], method=method, params=data.get("params"))
        return JsonRpcNotification(method=method, params=data.get("params"))

    if "id" not in data or not (data["id"] is None or _valid_id(data["id"])):
        return None

    if "error" in data and "result" not in data:
        error = data["error"]
        if not isinstance(error, dict):
            return None
        code = error.get("code")
        if not isinstance(code, int) or isinstance(code, bool):
            code = INTERNAL_ERROR
        return JsonRpcErrorResponse(
            id=data["id"],
            code=code,
            message=str(error.get("message", "")),
            data=error.get("data"),
        )

    if "result" in data and "error" not in data:
        return JsonRpcResponse(id=data["id"], result=data["result"])

    return None

