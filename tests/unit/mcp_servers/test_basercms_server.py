"""
Unit tests for the baserCMS MCP server's JSON-RPC handling.
"""

from __future__ import annotations

import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.basercms.client import BaserCMSClient
from src.basercms.config import BaserCMSConfig
from src.basercms.endpoints import EntityKind
from src.basercms.exceptions import RemoteServiceError
from src.mcp_servers.basercms.config import BaserCMSServerConfig
from src.mcp_servers.basercms.context import (
    ClientContext,
    client_context,
    create_request_file_context,
    get_client_context,
)
from src.mcp_servers.basercms.server import BaserCMSMCPServer
from src.mcp_servers.basercms.tools import ToolHandlers


@pytest.fixture
def server_config():
    return BaserCMSServerConfig(server_name="basercms-test", server_version="1.2.3")


@pytest.fixture
def server(server_config, fake_session_factory):
    handlers = ToolHandlers(
        BaserCMSClient(BaserCMSConfig(_env_file=None, email="a@example.com", password="x")),
        server_config=server_config,
        session_factory=fake_session_factory,
    )
    return BaserCMSMCPServer(server_config, tool_handlers=handlers)


def _text(response: dict) -> dict:
    return json.loads(response["result"]["content"][0]["text"])


# =============================================================================
# Protocol Methods
# =============================================================================


class TestProtocol:
    """initialize, tools/list, ping and unknown methods."""

    @pytest.mark.asyncio
    async def test_initialize(self, server) -> None:
        """initialize reports the server identity and tool capability."""
        response = await server.handle_message(
            {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}}
        )

        result = response["result"]
        assert response["id"] == 1
        assert result["serverInfo"] == {"name": "basercms-test", "version": "1.2.3"}
        assert "tools" in result["capabilities"]

    @pytest.mark.asyncio
    async def test_initialized_notification(self, server) -> None:
        """Notifications get no response."""
        response = await server.handle_message(
            {"jsonrpc": "2.0", "method": "notifications/initialized"}
        )

        assert response is None

    @pytest.mark.asyncio
    async def test_tools_list(self, server) -> None:
        """tools/list returns every registered tool."""
        response = await server.handle_message({"jsonrpc": "2.0", "id": 2, "method": "tools/list"})

        names = [tool["name"] for tool in response["result"]["tools"]]
        assert "addBlogPost" in names
        assert "getCustomEntries" in names

    @pytest.mark.asyncio
    async def test_ping(self, server) -> None:
        """ping returns an empty result."""
        response = await server.handle_message({"jsonrpc": "2.0", "id": 3, "method": "ping"})

        assert response == {"jsonrpc": "2.0", "id": 3, "result": {}}

    @pytest.mark.asyncio
    async def test_unknown_method(self, server) -> None:
        """Unknown methods are JSON-RPC errors."""
        response = await server.handle_message(
            {"jsonrpc": "2.0", "id": 4, "method": "resources/list"}
        )

        assert response["error"]["code"] == -32601


# =============================================================================
# Tool Calls
# =============================================================================


class TestToolCalls:
    """tools/call results and error mapping."""

    @pytest.mark.asyncio
    async def test_successful_call(self, server, fake_service) -> None:
        """A successful tool call returns its result as JSON text."""
        fake_service.seed(EntityKind.BLOG_TAG, {"id": 3, "name": "日本語"})

        response = await server.handle_message(
            {
                "jsonrpc": "2.0",
                "id": 5,
                "method": "tools/call",
                "params": {"name": "getBlogTag", "arguments": {"id": 3}},
            }
        )

        assert response["result"]["isError"] is False
        assert _text(response) == {"id": 3, "name": "日本語"}
        # non-ASCII text is not escaped
        assert "日本語" in response["result"]["content"][0]["text"]

    @pytest.mark.asyncio
    async def test_invalid_arguments_are_tool_errors(self, server, fake_service) -> None:
        """Validation failures come back as isError results with a code."""
        response = await server.handle_message(
            {
                "jsonrpc": "2.0",
                "id": 6,
                "method": "tools/call",
                "params": {"name": "addBlogPost", "arguments": {"title": "Hello"}},
            }
        )

        assert response["result"]["isError"] is True
        assert _text(response)["code"] == "INVALID_ARGUMENT"
        assert fake_service.created == []

    @pytest.mark.asyncio
    async def test_write_failure_is_tool_error(self, server, fake_service) -> None:
        """Remote write failures are reported, not raised."""
        fake_service.write_error = RemoteServiceError("Save failed", status_code=500)

        response = await server.handle_message(
            {
                "jsonrpc": "2.0",
                "id": 7,
                "method": "tools/call",
                "params": {"name": "addBlogTag", "arguments": {"name": "python"}},
            }
        )

        assert response["result"]["isError"] is True
        payload = _text(response)
        assert payload["code"] == "WRITE_FAILED"
        assert "Save failed" in payload["error"]

    @pytest.mark.asyncio
    async def test_unknown_tool(self, server) -> None:
        """Unknown tools are invalid-params errors."""
        response = await server.handle_message(
            {
                "jsonrpc": "2.0",
                "id": 8,
                "method": "tools/call",
                "params": {"name": "dropDatabase", "arguments": {}},
            }
        )

        assert response["error"]["code"] == -32602
        assert "dropDatabase" in response["error"]["message"]

    @pytest.mark.asyncio
    async def test_unexpected_error_is_internal(self, server_config) -> None:
        """Anything outside the error hierarchy is an internal error."""
        handlers = MagicMock()
        handlers.handle_tool_call = AsyncMock(side_effect=RuntimeError("kaboom"))
        server = BaserCMSMCPServer(server_config, tool_handlers=handlers)

        response = await server.handle_message(
            {
                "jsonrpc": "2.0",
                "id": 9,
                "method": "tools/call",
                "params": {"name": "getBlogTags", "arguments": {}},
            }
        )

        assert response["error"]["code"] == -32603

    @pytest.mark.asyncio
    async def test_call_tool_requires_initialize(self, server) -> None:
        """call_tool cannot be used before initialize."""
        with pytest.raises(RuntimeError):
            await server.call_tool("getBlogTags", {})

    @pytest.mark.asyncio
    async def test_context_manager(self, server) -> None:
        """The async context manager initializes the server."""
        async with server as running:
            result = await running.call_tool("serverInfo", {})

        assert result["isError"] is False


class TestClientContext:
    """Client context passed with messages."""

    def test_request_file_context(self) -> None:
        """Request-file contexts name the file as the client."""
        ctx = create_request_file_context("request.json")

        assert ctx.transport == "request-file"
        assert ctx.with_request("5").request_id == "5"

    def test_scoped_context_is_reset(self) -> None:
        """client_context restores the previous context on exit."""
        outer = get_client_context()
        ctx = ClientContext(transport="stdio").with_tool("getBlogTags")

        with client_context(ctx):
            assert get_client_context() is ctx
            assert ctx.to_span_attributes()["mcp.tool.name"] == "getBlogTags"

        assert get_client_context() is outer

    def test_span_attributes_skip_unknowns(self) -> None:
        """Unset values are not emitted as attributes."""
        attrs = ClientContext(session_id="s-1").to_span_attributes()

        assert attrs == {"client.session_id": "s-1", "client.transport": "stdio"}

    @pytest.mark.asyncio
    async def test_context_accepted(self, server) -> None:
        """Messages may carry an explicit client context."""
        ctx = ClientContext(session_id="s-1", transport="stdio")

        response = await server.handle_message(
            {"jsonrpc": "2.0", "id": 10, "method": "ping"}, ctx
        )

        assert response["result"] == {}
