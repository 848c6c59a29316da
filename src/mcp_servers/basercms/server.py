"""
baserCMS MCP Server

Main server class that implements the MCP JSON-RPC methods on top of the
tool handlers. The stdio transport uses the MCP SDK directly; this class
serves the request-file debug harness and tests.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from src.basercms.client import BaserCMSClient
from src.basercms.config import BaserCMSConfig
from src.basercms.exceptions import BaserCMSError
from src.common.telemetry import get_tracer
from src.mcp_servers.basercms.config import BaserCMSServerConfig
from src.mcp_servers.basercms.context import (
    ClientContext,
    client_context,
    get_client_context,
)
from src.mcp_servers.basercms.tools import TOOL_DEFINITIONS, ToolHandlers

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

PROTOCOL_VERSION = "2024-11-05"


def render_result(result: Any) -> str:
    """Serialize a tool result as the text of an MCP content block."""
    return json.dumps(result, ensure_ascii=False, default=str)


def render_error(error: BaserCMSError) -> str:
    return json.dumps(error.to_dict(), ensure_ascii=False)


class BaserCMSMCPServer:
    """
    MCP Server for baserCMS.

    Exposes blog and custom content management as MCP tools. Tool errors
    from the baserCMS layer come back as ``isError: true`` results;
    protocol errors (unknown method or tool) as JSON-RPC errors.
    """

    def __init__(
        self,
        config: BaserCMSServerConfig | None = None,
        basercms_config: BaserCMSConfig | None = None,
        tool_handlers: ToolHandlers | None = None,
    ):
        """
        Initialize the MCP server.

        Args:
            config: Server configuration. If None, loads from environment.
            basercms_config: API connection settings. If None, loads from environment.
            tool_handlers: Prebuilt handlers (tests pass handlers with fake sessions)
        """
        self._config = config or BaserCMSServerConfig()
        self._basercms_config = basercms_config
        self._tool_handlers = tool_handlers
        self._initialized = False

    @property
    def config(self) -> BaserCMSServerConfig:
        """Get server configuration."""
        return self._config

    @property
    def server_info(self) -> dict[str, Any]:
        """Get MCP server information."""
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "serverInfo": {
                "name": self._config.server_name,
                "version": self._config.server_version,
            },
            "capabilities": {
                "tools": {"listChanged": False},
            },
        }

    async def initialize(self) -> None:
        """
        Initialize server components.

        Builds the baserCMS client and tool handlers. No connection is
        opened here; each tool call acquires its own session.
        """
        if self._initialized:
            return

        with tracer.start_as_current_span("mcp.server.initialize") as span:
            span.set_attribute("server.name", self._config.server_name)
            self._add_client_context_to_span(span)

            if self._tool_handlers is None:
                client = BaserCMSClient(self._basercms_config or BaserCMSConfig())
                self._tool_handlers = ToolHandlers(client, server_config=self._config)
                logger.info(f"baserCMS client configured for {client.config.api_base_url}")

            self._initialized = True
            span.set_attribute("server.initialized", True)
            logger.info(f"MCP Server '{self._config.server_name}' initialized")

    async def shutdown(self) -> None:
        """Shutdown server."""
        with tracer.start_as_current_span("mcp.server.shutdown") as span:
            span.set_attribute("server.name", self._config.server_name)
            self._initialized = False
            logger.info(f"MCP Server '{self._config.server_name}' shut down")

    # =========================================================================
    # MCP Protocol Methods
    # =========================================================================

    async def list_tools(self) -> list[dict[str, Any]]:
        """
        List available tools (MCP tools/list).

        Returns:
            List of tool definitions
        """
        return TOOL_DEFINITIONS

    async def call_tool(
        self,
        name: str,
        arguments: dict[str, Any] | None,
    ) -> dict[str, Any]:
        """
        Call a tool (MCP tools/call).

        Args:
            name: Tool name
            arguments: Tool arguments

        Returns:
            MCP CallToolResult as a dictionary

        Raises:
            RuntimeError: If server not initialized
            ValueError: If tool not found
        """
        if not self._initialized or not self._tool_handlers:
            raise RuntimeError("Server not initialized. Call initialize() first.")

        with tracer.start_as_current_span("mcp.call_tool") as span:
            span.set_attribute("tool.name", name)
            self._add_client_context_to_span(span)

            try:
                result = await self._tool_handlers.handle_tool_call(name, arguments)
            except BaserCMSError as e:
                logger.warning(f"Tool {name} failed: {e}")
                span.set_attribute("tool.success", False)
                span.set_attribute("tool.error_code", e.code or "")
                return {
                    "content": [{"type": "text", "text": render_error(e)}],
                    "isError": True,
                }

            span.set_attribute("tool.success", True)
            return {
                "content": [{"type": "text", "text": render_result(result)}],
                "isError": False,
            }

    # =========================================================================
    # JSON-RPC Message Handling
    # =========================================================================

    def _add_client_context_to_span(
        self,
        span: Any,
        client_ctx: ClientContext | None = None,
    ) -> None:
        """Add client context attributes to a span."""
        ctx = client_ctx or get_client_context()
        if ctx:
            for key, value in ctx.to_span_attributes().items():
                span.set_attribute(key, value)

    async def handle_message(
        self,
        message: dict[str, Any],
        client_ctx: ClientContext | None = None,
    ) -> dict[str, Any] | None:
        """
        Handle an incoming JSON-RPC message.

        Args:
            message: JSON-RPC request message
            client_ctx: Client context for observability (optional, falls back to context var)

        Returns:
            JSON-RPC response message, or None for notifications
        """
        method = message.get("method", "")
        params = message.get("params") or {}
        request_id = message.get("id")

        # JSON-RPC notifications have no id and expect no response
        is_notification = request_id is None

        ctx = client_ctx or get_client_context() or ClientContext(transport="direct")
        if request_id is not None:
            ctx = ctx.with_request(str(request_id))

        with tracer.start_as_current_span("mcp.handle_message") as span:
            span.set_attribute("jsonrpc.method", method)
            span.set_attribute("jsonrpc.id", str(request_id))
            span.set_attribute("jsonrpc.is_notification", is_notification)
            self._add_client_context_to_span(span, ctx)

            try:
                if method == "initialize":
                    await self.initialize()
                    result = self.server_info

                elif method in ("initialized", "notifications/initialized"):
                    logger.debug("Received 'initialized' notification from client")
                    return None

                elif method == "tools/list":
                    result = {"tools": await self.list_tools()}

                elif method == "tools/call":
                    await self.initialize()
                    name = params.get("name", "")
                    with client_context(ctx.with_tool(name)):
                        result = await self.call_tool(name, params.get("arguments") or {})

                elif method == "ping":
                    result = {}

                else:
                    return {
                        "jsonrpc": "2.0",
                        "id": request_id,
                        "error": {
                            "code": -32601,
                            "message": f"Method not found: {method}",
                        },
                    }

                span.set_attribute("jsonrpc.success", True)
                return {"jsonrpc": "2.0", "id": request_id, "result": result}

            except ValueError as e:
                span.set_attribute("jsonrpc.error", str(e))
                return {
                    "jsonrpc": "2.0",
                    "id": request_id,
                    "error": {
                        "code": -32602,
                        "message": str(e),
                    },
                }
            except Exception as e:
                logger.exception(f"Error handling message: {e}")
                span.set_attribute("jsonrpc.error", str(e))
                return {
                    "jsonrpc": "2.0",
                    "id": request_id,
                    "error": {
                        "code": -32603,
                        "message": f"Internal error: {e}",
                    },
                }

    # =========================================================================
    # Context Manager Support
    # =========================================================================

    async def __aenter__(self) -> BaserCMSMCPServer:
        """Enter async context manager."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        await self.shutdown()
