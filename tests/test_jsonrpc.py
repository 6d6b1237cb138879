"""Tests for JSON-RPC 2.0 message classification."""

from cha_mcp.protocol.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    JsonRpcError,
    JsonRpcErrorResponse,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    parse_message,
)


class TestParseRequests:
    """Tests for classifying requests and notifications."""

    def test_parses_valid_request(self):
        """Should parse a request with params."""
        msg = parse_message(
            {"jsonrpc": "2.0", "id": 1, "method": "tools/list", "params": {"cursor": "abc"}}
        )

        assert isinstance(msg, JsonRpcRequest)
        assert msg.id == 1
        assert msg.method == "tools/list"
        assert msg.params == {"cursor": "abc"}

    def test_parses_request_with_string_id(self):
        """Should accept string IDs."""
        msg = parse_message({"jsonrpc": "2.0", "id": "req-123", "method": "ping"})

        assert isinstance(msg, JsonRpcRequest)
        assert msg.id == "req-123"

    def test_parses_request_with_zero_id(self):
        """Id 0 is a request, not a notification."""
        msg = parse_message({"jsonrpc": "2.0", "id": 0, "method": "ping"})

        assert isinstance(msg, JsonRpcRequest)
        assert msg.id == 0
        assert msg.params is None

    def test_parses_notification(self):
        """Should parse a message without id as a notification."""
        msg = parse_message({"jsonrpc": "2.0", "method": "notifications/initialized"})

        assert isinstance(msg, JsonRpcNotification)
        assert msg.method == "notifications/initialized"

    def test_null_id_is_notification(self):
        """A null id never gets a reply."""
        msg = parse_message({"jsonrpc": "2.0", "id": None, "method": "ping"})

        assert isinstance(msg, JsonRpcNotification)


class TestIgnoredDocuments:
    """Documents that are not JSON-RPC 2.0 are reported as None."""

    def test_missing_version(self):
        assert parse_message({"id": 1, "method": "ping"}) is None

    def test_wrong_version(self):
        assert parse_message({"jsonrpc": "1.0", "id": 1, "method": "ping"}) is None

    def test_non_object(self):
        assert parse_message("just a string") is None
        assert parse_message([{"jsonrpc": "2.0", "id": 1, "method": "ping"}]) is None

    def test_boolean_id(self):
        assert parse_message({"jsonrpc": "2.0", "id": True, "method": "ping"}) is None

    def test_no_method_no_result(self):
        assert parse_message({"jsonrpc": "2.0", "id": 1}) is None


class TestParseReplies:
    """Tests for classifying responses and error responses."""

    def test_parses_response(self):
        msg = parse_message({"jsonrpc": "2.0", "id": 3, "result": {"tools": []}})

        assert isinstance(msg, JsonRpcResponse)
        assert msg.id == 3
        assert msg.result == {"tools": []}

    def test_parses_error_response(self):
        msg = parse_message(
            {
                "jsonrpc": "2.0",
                "id": 4,
                "error": {"code": INVALID_PARAMS, "message": "Missing", "data": {"x": 1}},
            }
        )

        assert isinstance(msg, JsonRpcErrorResponse)
        assert msg.code == INVALID_PARAMS
        assert msg.message == "Missing"
        assert msg.data == {"x": 1}

    def test_error_without_integer_code(self):
        """A malformed code is reported as an internal error."""
        msg = parse_message({"jsonrpc": "2.0", "id": 4, "error": {"message": "boom"}})

        assert isinstance(msg, JsonRpcErrorResponse)
        assert msg.code == INTERNAL_ERROR

    def test_result_and_error_together_is_ignored(self):
        """Exactly one of result/error must be present."""
        data = {"jsonrpc": "2.0", "id": 1, "result": {}, "error": {"code": 1, "message": "x"}}
        assert parse_message(data) is None


class TestSerialization:
    """Tests for converting messages to wire dictionaries."""

    def test_request_to_dict(self):
        assert JsonRpcRequest(0, "ping").to_dict() == {"jsonrpc": "2.0", "id": 0, "method": "ping"}

    def test_notification_has_no_id(self):
        data = JsonRpcNotification("notifications/initialized", {}).to_dict()

        assert "id" not in data
        assert data["params"] == {}

    def test_response_to_dict(self):
        data = JsonRpcResponse(2, {}).to_dict()

        assert data == {"jsonrpc": "2.0", "id": 2, "result": {}}

    def test_error_response_to_dict(self):
        data = JsonRpcErrorResponse(5, -32600, "Tool not found: x").to_dict()

        assert data["error"] == {"code": -32600, "message": "Tool not found: x"}
        assert "result" not in data

    def test_error_response_to_exception(self):
        error = JsonRpcErrorResponse(5, -32600, "Tool not found: x", {"a": 1}).to_exception()

        assert isinstance(error, JsonRpcError)
        assert error.code == -32600
        assert str(error) == "Tool not found: x"
        assert error.data == {"a": 1}
