"""Command line entry points.

``cha-mcp-server`` serves the tea catalog over stdio. ``cha-mcp-client``
launches a server, performs the handshake and runs one operation against it.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from cha_mcp import __version__
from cha_mcp.client import MCPClient
from cha_mcp.config import ConfigLoadError, ServerConfig, load_config
from cha_mcp.llm import CompletionError
from cha_mcp.plugins.registry import RegistryError
from cha_mcp.plugins.teas import CatalogLoadError
from cha_mcp.protocol.correlator import ConnectionClosed
from cha_mcp.protocol.jsonrpc import JsonRpcError
from cha_mcp.protocol.transport import StdioTransport
from cha_mcp.server import create_server

DEFAULT_SERVER_COMMAND = "cha-mcp-server"


def server_main(argv: list[str] | None = None) -> int:
    """Run the MCP server on stdin/stdout.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(description="Tea catalog MCP server (stdio)")
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML configuration file (defaults apply if omitted)",
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"cha-mcp {__version__}",
    )
    args = parser.parse_args(argv)

    transport = StdioTransport()

    try:
        config = load_config(args.config) if args.config else ServerConfig()
        server = create_server(config, log=transport.log)
    except (ConfigLoadError, CatalogLoadError, RegistryError, OSError) as e:
        transport.log(f"Error loading server: {e}")
        return 1

    transport.log(f"Server {config.server_name} {config.server_version} started")
    if args.config:
        transport.log(f"Config loaded from: {args.config}")

    try:
        server.serve(transport)
        transport.log("EOF received, shutting down")
    except KeyboardInterrupt:
        transport.log("Interrupted, shutting down")
        return 130  # Standard exit code for SIGINT
    except Exception as e:
        transport.log(f"Error: {e}")
        return 1
    finally:
        server.close()

    return 0


def _parse_arguments(pairs: list[str]) -> dict[str, Any]:
    arguments: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise ValueError(f"Expected key=value, got: {pair}")
        arguments[key] = value
    return arguments


def _render(items: list[dict[str, Any]]) -> list[Any]:
    """Decode JSON text payloads so they print as structured output."""
    rendered = []
    for item in items:
        text = item.get("text")
        if not isinstance(text, str):
            rendered.append(item)
            continue
        try:
            rendered.append(json.loads(text))
        except json.JSONDecodeError:
            rendered.append(text)
    return rendered


def _print(value: Any) -> None:
    print(json.dumps(value, ensure_ascii=False, indent=2))


def _print_text(blocks: list[dict[str, Any]]) -> None:
    for block in blocks:
        if block.get("type") == "text":
            print(block.get("text", ""))


def client_main(argv: list[str] | None = None) -> int:
    """Run one operation against an MCP server.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(description="MCP stdio client")
    parser.add_argument(
        "--server",
        "-s",
        default=DEFAULT_SERVER_COMMAND,
        help=f"Server command line (default: {DEFAULT_SERVER_COMMAND})",
    )
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("info", help="Show the negotiated session")
    commands.add_parser("ping", help="Check the server is alive")
    commands.add_parser("tools", help="List tools")
    commands.add_parser("resources", help="List resources")
    call = commands.add_parser("call", help="Call a tool")
    call.add_argument("name")
    call.add_argument("arguments", nargs="*", metavar="key=value")
    read = commands.add_parser("read", help="Read a resource")
    read.add_argument("uri")
    ask = commands.add_parser("ask", help="Ask the language model, letting it use tools")
    ask.add_argument("prompt")
    args = parser.parse_args(argv)

    try:
        arguments = _parse_arguments(args.arguments) if args.command == "call" else {}
    except ValueError as e:
        parser.error(str(e))

    try:
        with MCPClient(args.server) as client:
            if args.command == "info":
                session = client.session
                _print(
                    {
                        "protocolVersion": session.protocol_version,
                        "capabilities": session.capabilities,
                        "serverInfo": session.server_info,
                    }
                )
            elif args.command == "ping":
                _print(client.ping())
            elif args.command == "tools":
                _print(client.tools)
            elif args.command == "resources":
                _print(client.resources)
            elif args.command == "call":
                _print(_render(client.call_tool(args.name, arguments)))
            elif args.command == "read":
                _print(_render(client.read_resource(args.uri)))
            elif args.command == "ask":
                exchange = client.ask(args.prompt)
                _print_text(exchange.reply)
                if exchange.tool_name:
                    print(f"\n{exchange.tool_name}({json.dumps(exchange.tool_arguments)})")
                    _print(_render(exchange.tool_content))
                    _print_text(exchange.followup)
    except JsonRpcError as e:
        print(f"Error {e.code}: {e.message}", file=sys.stderr)
        return 1
    except (ConnectionClosed, CompletionError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130

    return 0
