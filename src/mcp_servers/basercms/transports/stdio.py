"""
stdio Transport for the baserCMS MCP Server

Uses the official MCP SDK for full protocol compatibility with desktop
MCP clients. stdout carries the protocol stream; logs go to stderr.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace

import anyio
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from src.basercms.client import BaserCMSClient
from src.basercms.config import BaserCMSConfig
from src.basercms.exceptions import BaserCMSError
from src.mcp_servers.basercms.config import BaserCMSServerConfig
from src.mcp_servers.basercms.context import client_context, create_stdio_context
from src.mcp_servers.basercms.server import render_error, render_result
from src.mcp_servers.basercms.tools import TOOL_DEFINITIONS, ToolHandlers

logger = logging.getLogger(__name__)


class ToolCallError(Exception):
    """Carries a structured error payload back through the SDK as an error result."""


def create_lifespan(
    config: BaserCMSServerConfig,
    basercms_config: BaserCMSConfig | None = None,
):
    """Build the lifespan context manager for the SDK server."""

    @asynccontextmanager
    async def server_lifespan(server: Server) -> AsyncIterator[dict]:
        """
        Lifespan context manager for the MCP server.

        Builds the baserCMS client and tool handlers. Sessions are opened
        per tool call, so there is nothing to close on exit.
        """
        logger.info("Initializing server resources...")

        client = BaserCMSClient(basercms_config or BaserCMSConfig())
        tool_handlers = ToolHandlers(client, server_config=config)
        logger.info(f"baserCMS client configured for {client.config.api_base_url}")

        ctx = create_stdio_context()
        logger.info(f"Client context: session_id={ctx.session_id}")

        try:
            yield {"tool_handlers": tool_handlers, "client_context": ctx}
        finally:
            logger.info("Server resources cleaned up")

    return server_lifespan


def create_mcp_server(
    config: BaserCMSServerConfig | None = None,
    basercms_config: BaserCMSConfig | None = None,
) -> Server:
    """Create and configure the MCP server with all tool handlers."""
    config = config or BaserCMSServerConfig()

    server = Server(
        name=config.server_name,
        version=config.server_version,
        lifespan=create_lifespan(config, basercms_config),
    )

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """Return available tools."""
        return [
            Tool(
                name=t["name"],
                description=t["description"],
                inputSchema=t["inputSchema"],
            )
            for t in TOOL_DEFINITIONS
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[TextContent]:
        """Handle tool calls. Raising makes the SDK return an isError result."""
        request = server.request_context
        handlers: ToolHandlers = request.lifespan_context["tool_handlers"]
        ctx = request.lifespan_context["client_context"]

        client_params = request.session.client_params
        if client_params is not None and ctx.client_name is None:
            ctx = replace(ctx, client_name=client_params.clientInfo.name)
        ctx = ctx.with_request(str(request.request_id)).with_tool(name)

        try:
            with client_context(ctx):
                result = await handlers.handle_tool_call(name, arguments)
        except BaserCMSError as e:
            logger.warning(f"Tool {name} failed: {e}")
            raise ToolCallError(render_error(e)) from e

        return [TextContent(type="text", text=render_result(result))]

    return server


async def run_stdio_server(
    config: BaserCMSServerConfig | None = None,
    basercms_config: BaserCMSConfig | None = None,
) -> None:
    """
    Run the MCP server over stdin/stdout using the official SDK.
    """
    logger.info("Starting stdio transport (MCP SDK Server)")

    server = create_mcp_server(config, basercms_config)

    async with stdio_server() as (read_stream, write_stream):
        logger.info("stdio transport connected")
        init_options = server.create_initialization_options()
        await server.run(read_stream, write_stream, init_options)

    logger.info("stdio transport stopped")


# Allow running directly for testing
if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    anyio.run(run_stdio_server)
