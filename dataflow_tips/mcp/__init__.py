"""MCP (Model Context Protocol) client transport and tool server."""

from .models import McpContent, McpServerInfo, McpToolDefinition, McpToolResult
from .server import McpToolServer, ToolDefinition, create_tool_app
from .transport import (
    McpConnectionError,
    McpProtocolError,
    McpTimeoutError,
    McpTransportError,
    SseClientTransport,
)

__all__ = [
    "McpContent",
    "McpServerInfo",
    "McpToolDefinition",
    "McpToolResult",
    "McpToolServer",
    "ToolDefinition",
    "create_tool_app",
    "McpConnectionError",
    "McpProtocolError",
    "McpTimeoutError",
    "McpTransportError",
    "SseClientTransport",
]
