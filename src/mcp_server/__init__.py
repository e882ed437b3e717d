"""MCP Server - tool registry, request dispatch and the stdio front-end.

The server registers the Management API tools, resolves credentials on
demand and routes each tool call to its handler.
"""

from mcp_server.registry import ToolRegistry
from mcp_server.router import RequestDispatcher
from mcp_server.main import Auth0MCPServer, run_server

__all__ = [
    "ToolRegistry",
    "RequestDispatcher",
    "Auth0MCPServer",
    "run_server",
]
