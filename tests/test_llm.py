"""Tests for the completion service client."""

import json

import httpx
import pytest

from cha_mcp.llm import (
    ANTHROPIC_MODEL,
    ANTHROPIC_URL,
    ANTHROPIC_VERSION,
    CompletionClient,
    CompletionError,
    to_completion_tool,
)


def _client(handler, api_key: str | None = "test-key") -> CompletionClient:
    return CompletionClient(
        api_key=api_key, http_client=httpx.Client(transport=httpx.MockTransport(handler))
    )


class TestToCompletionTool:
    def test_renames_input_schema(self):
        tool = {
            "name": "getTeasByType",
            "description": "Get all teas of a specific type",
            "inputSchema": {"type": "object", "properties": {"type": {"type": "string"}}},
        }

        assert to_completion_tool(tool) == {
            "name": "getTeasByType",
            "description": "Get all teas of a specific type",
            "input_schema": {"type": "object", "properties": {"type": {"type": "string"}}},
        }

    def test_defaults_missing_schema(self):
        assert to_completion_tool({"name": "x"})["input_schema"] == {
            "type": "object",
            "properties": {},
        }


class TestCompletionClient:
    """Tests for requests to the messages endpoint."""

    def test_posts_messages_and_returns_content(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"content": [{"type": "text", "text": "Hi"}]})

        client = _client(handler)
        content = client.complete([{"role": "user", "content": "Hello"}], [], system="Teas")

        assert content == [{"type": "text", "text": "Hi"}]
        assert seen["url"] == ANTHROPIC_URL
        assert seen["headers"]["x-api-key"] == "test-key"
        assert seen["headers"]["anthropic-version"] == ANTHROPIC_VERSION
        assert seen["body"]["model"] == ANTHROPIC_MODEL
        assert seen["body"]["max_tokens"] == 1024
        assert seen["body"]["system"] == "Teas"
        assert seen["body"]["messages"] == [{"role": "user", "content": "Hello"}]

    def test_omits_empty_system_prompt(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"content": []})

        _client(handler).complete([], [])

        assert "system" not in seen["body"]

    def test_requires_api_key(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        client = _client(lambda request: httpx.Response(200, json={"content": []}), api_key=None)

        with pytest.raises(CompletionError, match="ANTHROPIC_API_KEY"):
            client.complete([], [])

    def test_reads_api_key_from_environment(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "env-key")
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["key"] = request.headers["x-api-key"]
            return httpx.Response(200, json={"content": []})

        _client(handler, api_key=None).complete([], [])

        assert seen["key"] == "env-key"

    def test_http_error(self):
        client = _client(lambda request: httpx.Response(529, json={"error": "overloaded"}))

        with pytest.raises(CompletionError, match="529"):
            client.complete([], [])

    def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable")

        with pytest.raises(CompletionError, match="unreachable"):
            _client(handler).complete([], [])

    def test_unexpected_body(self):
        client = _client(lambda request: httpx.Response(200, json={"id": "msg"}))

        with pytest.raises(CompletionError, match="Unexpected"):
            client.complete([], [])
