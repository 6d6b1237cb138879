"""Shared fixtures for server and client tests."""

from __future__ import annotations

import json
from typing import Any

import pytest

from cha_mcp.plugins.registry import CapabilityRegistry
from cha_mcp.plugins.teas import Tea, TeaCatalogPlugin
from cha_mcp.server import MCPServer

SAMPLE_TEAS = [
    Tea(
        name="Longjing",
        simplified="龙井",
        traditional="龍井",
        description="Dragon Well",
        type="Green",
        origin="Zhejiang",
        brewingTemp="80°C",
        steepTime="2-3 minutes",
    ),
    Tea(
        name="Huangshan Maofeng",
        simplified="黄山毛峰",
        traditional="黃山毛峰",
        description="Yellow Mountain fur peak",
        type="Green",
        origin="Anhui",
        brewingTemp="80°C",
        steepTime="2-3 minutes",
    ),
    Tea(
        name="Tieguanyin",
        simplified="铁观音",
        traditional="鐵觀音",
        description="Iron Goddess",
        type="Oolong",
        origin="Fujian",
        brewingTemp="95°C",
        steepTime="1 minute",
    ),
    Tea(
        name="Keemun",
        simplified="祁门红茶",
        traditional="祁門紅茶",
        description="Keemun black",
        type="Black",
        origin="Anhui",
        brewingTemp="95°C",
        steepTime="3-4 minutes",
    ),
]

INIT_PARAMS = {
    "protocolVersion": "2025-06-18",
    "capabilities": {},
    "clientInfo": {"name": "test", "version": "1.0"},
}


def request(msg_id: int | str, method: str, params: Any | None = None) -> str:
    """Build a raw request line."""
    data: dict[str, Any] = {"jsonrpc": "2.0", "id": msg_id, "method": method}
    if params is not None:
        data["params"] = params
    return json.dumps(data)


def notification(method: str, params: Any | None = None) -> str:
    """Build a raw notification line."""
    data: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
    if params is not None:
        data["params"] = params
    return json.dumps(data)


def payload(reply: dict[str, Any]) -> Any:
    """Decode the JSON text of the first content item of a tools/call reply."""
    return json.loads(reply["result"]["content"][0]["text"])


@pytest.fixture
def tea_plugin() -> TeaCatalogPlugin:
    """Tea plugin over a small fixed catalog."""
    return TeaCatalogPlugin(SAMPLE_TEAS)


@pytest.fixture
def registry(tea_plugin: TeaCatalogPlugin) -> CapabilityRegistry:
    return CapabilityRegistry.from_plugins([tea_plugin])


@pytest.fixture
def server(registry: CapabilityRegistry) -> MCPServer:
    return MCPServer(registry)


@pytest.fixture
def initialized_server(server: MCPServer) -> MCPServer:
    """Server that has completed the handshake."""
    server.handle_message(request(0, "initialize", INIT_PARAMS))
    server.handle_message(notification("notifications/initialized"))
    return server
