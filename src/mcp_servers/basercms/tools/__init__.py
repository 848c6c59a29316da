"""
MCP tools for baserCMS: blog, custom content and system tools.
"""

from src.mcp_servers.basercms.tools.handlers import ToolHandlers
from src.mcp_servers.basercms.tools.registry import (
    TOOL_DEFINITIONS,
    TOOLS,
    TOOLS_BY_NAME,
    ToolSpec,
    get_tool,
)

__all__ = ["TOOL_DEFINITIONS", "TOOLS", "TOOLS_BY_NAME", "ToolHandlers", "ToolSpec", "get_tool"]
