"""
Client Context for Tracing

Identifies which client, JSON-RPC request and tool a span belongs to.
The current context lives in a ContextVar, so concurrent tool calls on
one event loop each see their own.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class ClientContext:
    """
    Who is calling, and for which request.

    Attributes:
        session_id: Unique ID for this client connection
        transport: How the message arrived (stdio, request-file)
        client_name: Client name from the MCP initialize handshake, if known
        request_id: JSON-RPC id of the message being handled
        tool_name: Tool being called, for tools/call messages
    """

    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    transport: str = "stdio"
    client_name: str | None = None
    request_id: str | None = None
    tool_name: str | None = None

    def with_request(self, request_id: str) -> ClientContext:
        return replace(self, request_id=request_id)

    def with_tool(self, tool_name: str) -> ClientContext:
        return replace(self, tool_name=tool_name)

    def to_span_attributes(self) -> dict[str, str]:
        """Convert to OTEL span attributes, leaving out unknown values."""
        attrs = {
            "client.session_id": self.session_id,
            "client.transport": self.transport,
        }
        optional = {
            "client.name": self.client_name,
            "request.correlation_id": self.request_id,
            "mcp.tool.name": self.tool_name,
        }
        attrs.update({key: value for key, value in optional.items() if value})
        return attrs


_current_context: ContextVar[ClientContext | None] = ContextVar(
    "basercms_client_context", default=None
)


def get_client_context() -> ClientContext | None:
    """Get the current client context."""
    return _current_context.get()


def set_client_context(ctx: ClientContext | None) -> None:
    """Set the current client context for the rest of this task."""
    _current_context.set(ctx)


@contextmanager
def client_context(ctx: ClientContext) -> Iterator[ClientContext]:
    """Make ``ctx`` current for the duration of the block."""
    token = _current_context.set(ctx)
    try:
        yield ctx
    finally:
        _current_context.reset(token)


def create_stdio_context(client_name: str | None = None) -> ClientContext:
    """
    Create client context for the stdio transport.

    stdio serves one client per process, so one session ID covers it.
    """
    return ClientContext(transport="stdio", client_name=client_name)


def create_request_file_context(path: str) -> ClientContext:
    """Create client context for a single message replayed from a file."""
    return ClientContext(transport="request-file", client_name=f"request-file:{path}")
