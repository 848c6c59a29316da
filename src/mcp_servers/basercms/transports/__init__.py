"""
MCP Transport Implementations

Provides the stdio transport layer for the baserCMS MCP Server.
"""

from src.mcp_servers.basercms.transports.stdio import create_mcp_server, run_stdio_server

__all__ = ["create_mcp_server", "run_stdio_server"]
