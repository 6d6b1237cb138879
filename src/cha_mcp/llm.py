"""Completion service client (Anthropic messages API).

The client side hands the conversation and the server's tool schemas to the
model and gets back a list of content blocks, which may include a
``tool_use`` block asking for a tools/call.
"""

from __future__ import annotations

import os
from typing import Any

import httpx

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_MODEL = "claude-sonnet-4-20250514"
ANTHROPIC_VERSION = "2023-06-01"
MAX_TOKENS = 1024


class CompletionError(Exception):
    """Raised when the completion service cannot be reached or fails."""

    pass


def to_completion_tool(tool: dict[str, Any]) -> dict[str, Any]:
    """Convert an MCP tool definition to the completion API tool format."""
    return {
        "name": tool["name"],
        "description": tool.get("description", ""),
        "input_schema": tool.get("inputSchema") or {"type": "object", "properties": {}},
    }


class CompletionClient:
    """Thin wrapper around the messages endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = ANTHROPIC_MODEL,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: API key (defaults to ANTHROPIC_API_KEY from the environment).
            model: Model identifier.
            http_client: Preconfigured httpx client (for tests).
        """
        self._api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self._model = model
        self._client = http_client or httpx.Client(timeout=60.0)

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._client.close()

    def complete(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        system: str | None = None,
    ) -> list[dict[str, Any]]:
        """Request a completion.

        Args:
            messages: Conversation so far ({"role", "content"} dicts).
            tools: Tool schemas in completion API format.
            system: Optional system prompt.

        Returns:
            The ``content`` list of the model's reply.

        Raises:
            CompletionError: If no API key is set or the request fails.
        """
        if not self._api_key:
            raise CompletionError("ANTHROPIC_API_KEY environment variable is required")

        body: dict[str, Any] = {
            "model": self._model,
            "max_tokens": MAX_TOKENS,
            "messages": messages,
            "tools": tools,
        }
        if system:
            body["system"] = system

        try:
            response = self._client.post(
                ANTHROPIC_URL,
                json=body,
                headers={
                    "x-api-key": self._api_key,
                    "anthropic-version": ANTHROPIC_VERSION,
                    "content-type": "application/json",
                },
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise CompletionError(
                f"Completion request failed: {e.response.status_code} {e.response.reason_phrase}"
            ) from e
        except httpx.HTTPError as e:
            raise CompletionError(f"Completion request failed: {e}") from e

        try:
            content = response.json()["content"]
        except (ValueError, KeyError, TypeError) as e:
            raise CompletionError(f"Unexpected completion response: {e}") from e
        if not isinstance(content, list):
            raise CompletionError("Unexpected completion response: content is not a list")
        return content
