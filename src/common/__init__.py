"""
Common Utilities

Logging sanitization and telemetry shared by the client library and the
MCP server.
"""
