"""baserCMS MCP - Model Context Protocol adapter for the baserCMS Web API."""

__version__ = "0.1.0"
