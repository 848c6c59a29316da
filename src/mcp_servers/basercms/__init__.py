"""
baserCMS MCP Server

Manage baserCMS blogs and custom content via Model Context Protocol.
Serves MCP over stdio; a request-file mode replays single messages for debugging.
"""

from src.mcp_servers.basercms.config import BaserCMSServerConfig
from src.mcp_servers.basercms.context import ClientContext
from src.mcp_servers.basercms.server import BaserCMSMCPServer

__all__ = ["BaserCMSMCPServer", "BaserCMSServerConfig", "ClientContext"]
