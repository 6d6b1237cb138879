"""MCPClient - drives an MCP server over stdio.

Launches the server as a subprocess, performs the initialize handshake and
exposes discovery and invocation of the server's tools and resources.

Usage::

    with MCPClient("cha-mcp-server") as client:
        tools = client.list_tools()
        content = client.call_tool("getTeasByType", {"type": "Green"})
"""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass, field
from typing import Any

from cha_mcp.llm import CompletionClient, to_completion_tool
from cha_mcp.protocol.correlator import Correlator
from cha_mcp.protocol.transport import StdioTransport

CLIENT_PROTOCOL_VERSION = "2025-06-18"
CLIENT_INFO = {"name": "mcp/client", "version": "0.1.0"}


@dataclass(frozen=True)
class SessionInfo:
    """What the handshake negotiated; fixed for the life of the connection."""

    protocol_version: str
    capabilities: dict[str, Any]
    server_info: dict[str, Any]
    client_info: dict[str, Any]

    def supports(self, capability: str) -> bool:
        return bool(self.capabilities.get(capability))


@dataclass
class Exchange:
    """Outcome of one prompt sent through :meth:`MCPClient.ask`."""

    reply: list[dict[str, Any]]
    tool_name: str | None = None
    tool_arguments: dict[str, Any] = field(default_factory=dict)
    tool_content: list[dict[str, Any]] = field(default_factory=list)
    followup: list[dict[str, Any]] = field(default_factory=list)


class MCPClient:
    """Client side of an MCP connection.

    Satisfies the handshake ordering: ``initialize``, then the
    ``notifications/initialized`` notification, then everything else.
    """

    def __init__(
        self,
        command: str | list[str] | None = None,
        transport: StdioTransport | None = None,
        completion: CompletionClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            command: Server command line to launch.
            transport: Already connected transport (instead of a command).
            completion: Completion service used by :meth:`ask`.
        """
        if command is None and transport is None:
            raise ValueError("MCPClient needs a server command or a transport")
        self._command = command
        self._transport = transport
        self._completion = completion
        self._process: subprocess.Popen[bytes] | None = None
        self._correlator: Correlator | None = None
        self._session: SessionInfo | None = None
        self._tools: list[dict[str, Any]] = []
        self._resources: list[dict[str, Any]] = []

    def __enter__(self) -> MCPClient:
        self.connect()
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    @property
    def session(self) -> SessionInfo:
        if self._session is None:
            raise RuntimeError("Client not connected")
        return self._session

    @property
    def tools(self) -> list[dict[str, Any]]:
        return list(self._tools)

    @property
    def resources(self) -> list[dict[str, Any]]:
        return list(self._resources)

    def connect(self) -> SessionInfo:
        """Start the transport, perform the handshake and discover capabilities.

        If any step fails the connection is closed (and a launched server
        process reaped) before the error propagates.
        """
        if self._transport is None:
            self._transport = self._create_transport()
        try:
            self._correlator = Correlator(self._transport)
            self._handshake()
            self.list_tools()
            self.list_resources()
        except BaseException:
            self.close()
            raise
        return self.session

    def close(self) -> None:
        """Close the connection and stop the server process."""
        if self._transport is not None:
            self._transport.close()
        if self._process is not None:
            try:
                self._process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                self._process.terminate()
                self._process.wait()
            if self._process.stdout is not None:
                self._process.stdout.close()
            self._process = None

    def ping(self) -> dict[str, Any]:
        return self._call("ping")

    def list_tools(self) -> list[dict[str, Any]]:
        """Fetch the server's tools (empty if the capability is absent)."""
        if self.session.supports("tools"):
            self._tools = list(self._call("tools/list", {}).get("tools") or [])
        else:
            self._tools = []
        return self.tools

    def list_resources(self) -> list[dict[str, Any]]:
        """Fetch the server's resources (empty if the capability is absent)."""
        if self.session.supports("resources"):
            self._resources = list(self._call("resources/list", {}).get("resources") or [])
        else:
            self._resources = []
        return self.resources

    def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Invoke a tool and return its content items.

        Raises:
            JsonRpcError: If the server rejects the call (e.g. unknown tool).
        """
        result = self._call("tools/call", {"name": name, "arguments": arguments or {}})
        return list(result.get("content") or [])

    def read_resource(self, uri: str) -> list[dict[str, Any]]:
        """Read a resource and return its content items.

        Raises:
            JsonRpcError: If the server rejects the read (e.g. unknown uri).
        """
        result = self._call("resources/read", {"uri": uri})
        return list(result.get("contents") or [])

    def ask(self, prompt: str) -> Exchange:
        """Send a prompt to the completion service with the server's tools.

        All resources are read and passed as the system prompt. If the model
        ends its reply with a tool_use block, the tool is called and the model
        is asked once more with the tool's result.

        Raises:
            CompletionError: If the completion service fails.
        """
        completion = self._completion_client()
        system = "\n".join(
            item.get("text", "")
            for resource in self._resources
            for item in self.read_resource(resource["uri"])
        )
        tools = [to_completion_tool(tool) for tool in self._tools]
        messages: list[dict[str, Any]] = [{"role": "user", "content": prompt}]

        reply = completion.complete(messages, tools, system or None)
        exchange = Exchange(reply=reply)
        messages.append({"role": "assistant", "content": reply})

        last = reply[-1] if reply else {}
        if last.get("type") != "tool_use":
            return exchange

        exchange.tool_name = last["name"]
        exchange.tool_arguments = last.get("input") or {}
        exchange.tool_content = self.call_tool(exchange.tool_name, exchange.tool_arguments)
        messages.append(
            {
                "role": "user",
                "content": [
                    {
                        "type": "tool_result",
                        "tool_use_id": last.get("id"),
                        "content": exchange.tool_content[0].get("text", "")
                        if exchange.tool_content
                        else "",
                    }
                ],
            }
        )
        exchange.followup = completion.complete(messages, tools)
        return exchange

    def _create_transport(self) -> StdioTransport:
        """Launch the server process and wrap its pipes."""
        assert self._command is not None
        args = shlex.split(self._command) if isinstance(self._command, str) else self._command
        self._process = subprocess.Popen(
            args,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
        )
        return StdioTransport(stdin=self._process.stdout, stdout=self._process.stdin)

    def _completion_client(self) -> CompletionClient:
        if self._completion is None:
            self._completion = CompletionClient()
        return self._completion

    def _handshake(self) -> None:
        """Perform the MCP initialize handshake."""
        result = self._call(
            "initialize",
            {
                "protocolVersion": CLIENT_PROTOCOL_VERSION,
                "capabilities": {},
                "clientInfo": CLIENT_INFO,
            },
        )
        self._session = SessionInfo(
            protocol_version=str(result.get("protocolVersion", "")),
            capabilities=dict(result.get("capabilities") or {}),
            server_info=dict(result.get("serverInfo") or {}),
            client_info=dict(CLIENT_INFO),
        )
        if self._session.protocol_version != CLIENT_PROTOCOL_VERSION:
            self._log(
                f"Server speaks protocol {self._session.protocol_version}, "
                f"requested {CLIENT_PROTOCOL_VERSION}; continuing"
            )
        self._correlator_or_fail().notify("notifications/initialized", {})

    def _call(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        result = self._correlator_or_fail().call(method, params)
        return result if isinstance(result, dict) else {}

    def _correlator_or_fail(self) -> Correlator:
        if self._correlator is None:
            raise RuntimeError("Client not connected")
        return self._correlator

    def _log(self, message: str) -> None:
        if self._transport is not None:
            self._transport.log(message)
