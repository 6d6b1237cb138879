"""Tests for the tools and resources request handlers."""

import pytest

from cha_mcp.plugins.registry import CapabilityRegistry
from cha_mcp.protocol.jsonrpc import INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST, JsonRpcError
from cha_mcp.protocol.resources import ResourcesHandler
from cha_mcp.protocol.tools import ToolsHandler
from tests.test_registry import FailingPlugin, MockPlugin


@pytest.fixture
def tools_handler() -> ToolsHandler:
    return ToolsHandler(CapabilityRegistry.from_plugins([MockPlugin()]))


@pytest.fixture
def resources_handler() -> ResourcesHandler:
    return ResourcesHandler(CapabilityRegistry.from_plugins([MockPlugin()]))


class TestToolsHandler:
    """Tests for tools/list and tools/call."""

    def test_list(self, tools_handler: ToolsHandler):
        result = tools_handler.handle_list().to_dict()

        assert [t["name"] for t in result["tools"]] == ["echo"]

    def test_call(self, tools_handler: ToolsHandler):
        result = tools_handler.handle_call({"name": "echo", "arguments": {"message": "hi"}})

        assert result.to_dict() == {"content": [{"type": "text", "text": "hi"}]}

    @pytest.mark.parametrize("params", [{}, {"name": ""}, {"name": None}])
    def test_missing_name(self, tools_handler: ToolsHandler, params):
        with pytest.raises(JsonRpcError) as exc_info:
            tools_handler.handle_call(params)

        assert exc_info.value.code == INVALID_PARAMS
        assert exc_info.value.message == "Missing required parameter: name"

    def test_unknown_name(self, tools_handler: ToolsHandler):
        with pytest.raises(JsonRpcError) as exc_info:
            tools_handler.handle_call({"name": "nope"})

        assert exc_info.value.code == INVALID_REQUEST
        assert exc_info.value.message == "Tool not found: nope"

    def test_non_string_name(self, tools_handler: ToolsHandler):
        with pytest.raises(JsonRpcError) as exc_info:
            tools_handler.handle_call({"name": ["echo"]})

        assert exc_info.value.code == INVALID_REQUEST

    def test_arguments_must_be_object(self, tools_handler: ToolsHandler):
        with pytest.raises(JsonRpcError) as exc_info:
            tools_handler.handle_call({"name": "echo", "arguments": ["hi"]})

        assert exc_info.value.code == INVALID_PARAMS

    def test_arguments_default_to_empty(self):
        seen = {}

        class RecordingPlugin(MockPlugin):
            def execute(self, tool_name, arguments):
                seen.update(arguments=arguments)
                return super().execute(tool_name, {"message": "ok"})

        handler = ToolsHandler(CapabilityRegistry.from_plugins([RecordingPlugin()]))
        handler.handle_call({"name": "echo"})

        assert seen["arguments"] == {}

    def test_tool_crash_is_internal_error(self):
        handler = ToolsHandler(CapabilityRegistry.from_plugins([FailingPlugin()]))

        with pytest.raises(JsonRpcError) as exc_info:
            handler.handle_call({"name": "echo", "arguments": {}})

        assert exc_info.value.code == INTERNAL_ERROR
        assert exc_info.value.message == "Tool execution failed: echo"


class TestResourcesHandler:
    """Tests for resources/list and resources/read."""

    def test_list(self, resources_handler: ResourcesHandler):
        result = resources_handler.handle_list().to_dict()

        assert result["resources"][0]["uri"] == "mock://greeting"
        assert "text" not in result["resources"][0]

    def test_read(self, resources_handler: ResourcesHandler):
        result = resources_handler.handle_read({"uri": "mock://greeting"}).to_dict()

        assert result == {
            "contents": [{"uri": "mock://greeting", "mimeType": "text/plain", "text": "hi"}]
        }

    def test_missing_uri(self, resources_handler: ResourcesHandler):
        with pytest.raises(JsonRpcError) as exc_info:
            resources_handler.handle_read({})

        assert exc_info.value.code == INVALID_PARAMS
        assert exc_info.value.message == "Missing required parameter: uri"

    def test_unknown_uri(self, resources_handler: ResourcesHandler):
        with pytest.raises(JsonRpcError) as exc_info:
            resources_handler.handle_read({"uri": "mock://nope"})

        assert exc_info.value.code == INVALID_REQUEST
        assert exc_info.value.message == "Resource not found: mock://nope"

    def test_read_crash_is_internal_error(self):
        handler = ResourcesHandler(CapabilityRegistry.from_plugins([FailingPlugin()]))

        with pytest.raises(JsonRpcError) as exc_info:
            handler.handle_read({"uri": "mock://greeting"})

        assert exc_info.value.code == INTERNAL_ERROR
        assert exc_info.value.message == "Resource read failed: mock://greeting"
