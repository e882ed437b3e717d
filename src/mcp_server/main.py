"""Auth0 MCP Server - stdio protocol front-end.

Exposes the tool catalog over the Model Context Protocol. stdout is the
protocol channel, so everything else (logs included) goes to stderr.
"""

import asyncio
from typing import Any, Optional

import httpx
import mcp.server.stdio as mcp_stdio
from mcp import types
from mcp.server.lowlevel import NotificationOptions, Server
from mcp.server.models import InitializationOptions

from shared.config import Settings, get_settings
from shared.logging import get_logger, setup_logging
from shared.models import HandlerResponse
from credentials.resolver import CredentialResolver, TokenRetrievalError
from mcp_server.registry import ToolRegistry
from mcp_server.router import RequestDispatcher
from resources import load_all_resources

logger = get_logger(__name__)

SERVER_VERSION = "0.1.0"


def call_arguments(params: types.CallToolRequestParams) -> dict[str, Any]:
    """
    Extract tool arguments from a call request.

    Older clients send them as ``parameters`` instead of ``arguments``.
    """
    if params.arguments is not None:
        return dict(params.arguments)
    legacy = (params.model_extra or {}).get("parameters")
    if isinstance(legacy, dict):
        return dict(legacy)
    return {}


def to_call_result(response: HandlerResponse) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=item.text) for item in response.content],
        isError=response.is_error,
    )


class Auth0MCPServer:
    """
    MCP server for the Auth0 Management API.

    Builds the registry, the dispatcher and the low-level MCP server, and
    wires ``tools/list`` and ``tools/call`` to them.
    """

    def __init__(
        self,
        settings: Settings,
        resolver: Optional[CredentialResolver] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        self.settings = settings
        self.resolver = resolver or CredentialResolver(settings)
        self.registry = ToolRegistry()
        self.dispatcher = RequestDispatcher(self.registry, self.resolver)

        load_all_resources(
            self.registry,
            self.dispatcher,
            timeout=settings.auth0.http_timeout_seconds,
            transport=transport
        )

        self.server = Server(settings.server_name)
        self._register_handlers()

        logger.info(
            "Auth0 MCP server built",
            families=self.registry.list_families(),
            tool_count=len(self.registry)
        )

    def _register_handlers(self) -> None:
        @self.server.list_tools()  # type: ignore
        async def handle_list_tools() -> list[types.Tool]:
            return [
                types.Tool(
                    name=tool.name.value,
                    description=tool.description,
                    inputSchema=tool.input_schema,
                )
                for tool in self.registry.list_tools()
            ]

        # Registered directly so the SDK does not validate arguments against
        # the input schema; handlers report missing parameters themselves.
        self.server.request_handlers[types.CallToolRequest] = self._handle_call_tool

    async def _handle_call_tool(self, request: types.CallToolRequest) -> types.ServerResult:
        params = request.params
        response = await self.dispatcher.dispatch(params.name, call_arguments(params))
        return types.ServerResult(to_call_result(response))

    async def warm_up(self) -> None:
        """Resolve credentials once before serving; failures are only logged."""
        try:
            await self.dispatcher.ensure_credential()
        except TokenRetrievalError as e:
            logger.warning(
                "Credentials not available yet, tool calls will retry",
                error=str(e)
            )

    async def run_stdio(self) -> None:
        await self.warm_up()
        logger.info("Serving MCP over stdio", server=self.settings.server_name)
        async with mcp_stdio.stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name=self.settings.server_name,
                    server_version=SERVER_VERSION,
                    capabilities=self.server.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={},
                    ),
                ),
            )


def run_server(settings: Optional[Settings] = None) -> None:
    """Run the Auth0 MCP server on stdio until the client disconnects."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, json_output=settings.json_logs)

    server = Auth0MCPServer(settings)
    try:
        asyncio.run(server.run_stdio())
    except KeyboardInterrupt:
        logger.info("Shutting down Auth0 MCP server")


def main() -> None:
    """Run the Auth0 MCP server."""
    run_server()


if __name__ == "__main__":
    main()
