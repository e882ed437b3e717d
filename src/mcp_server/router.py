"""Request Dispatcher for the Auth0 MCP server.

Routes tool calls to their handlers. Makes sure a usable credential is
available first and turns every failure into an error response.
"""

import time
import uuid
from typing import Any, Optional

from shared.logging import bind_context, clear_context, get_logger, redact_sensitive
from shared.models import Credential, HandlerConfig, HandlerRequest, HandlerResponse
from credentials.resolver import CredentialResolver, TokenRetrievalError
from mcp_server.registry import ToolRegistry
from resources.base import Handler

logger = get_logger(__name__)

AUTH_GUIDANCE = (
    "Run `auth0 login` to authenticate with your tenant, or set the "
    "AUTH0_TOKEN and AUTH0_DOMAIN environment variables."
)


class RequestDispatcher:
    """
    Routes tool calls to the handler registered for each tool.

    Responsibilities:
    - Reject unknown tools
    - Resolve or refresh the credential
    - Invoke the handler
    - Convert unexpected failures into error responses
    """

    def __init__(self, registry: ToolRegistry, resolver: CredentialResolver) -> None:
        self.registry = registry
        self.resolver = resolver
        self.credential: Optional[Credential] = None
        self._handlers: dict[str, Handler] = {}

    def register_handler(self, handler: Handler) -> None:
        """
        Register the handler for its tool.

        Args:
            handler: Handler instance; its tool must already be registered

        Raises:
            ValueError: If the tool is unknown or already has a handler
        """
        name = handler.name
        if name not in self.registry:
            raise ValueError(f"Tool '{name}' is not registered")
        if name in self._handlers:
            raise ValueError(f"Tool '{name}' already has a handler")
        self._handlers[name] = handler

    def handler_names(self) -> list[str]:
        return list(self._handlers)

    async def ensure_credential(self, credential: Optional[Credential] = None) -> Credential:
        """
        Return a usable credential, resolving a new one when needed.

        A credential that exists but is no longer usable is refreshed
        with ``force_refresh`` so stale sources are skipped.

        Raises:
            TokenRetrievalError: If no credential could be resolved
        """
        current = credential or self.credential
        if current is not None and current.is_usable():
            return current

        if current is not None:
            logger.info("Credential expired, refreshing", source=current.source)

        self.credential = await self.resolver.resolve(force_refresh=current is not None)
        return self.credential

    async def dispatch(
        self,
        tool_name: str,
        parameters: Optional[dict[str, Any]] = None,
        credential: Optional[Credential] = None
    ) -> HandlerResponse:
        """
        Execute a tool call.

        This is the main entry point for tool execution.

        Args:
            tool_name: Tool identifier
            parameters: Caller supplied arguments
            credential: Credential to use instead of the current one

        Returns:
            Handler response; never raises
        """
        bind_context(tool=tool_name, request_id=str(uuid.uuid4()))
        try:
            return await self._dispatch(tool_name, parameters or {}, credential)
        finally:
            clear_context()

    async def _dispatch(
        self,
        tool_name: str,
        parameters: dict[str, Any],
        credential: Optional[Credential]
    ) -> HandlerResponse:
        start_time = time.time()
        handler = self._handlers.get(tool_name)
        if handler is None:
            logger.warning("Unknown tool requested")
            return HandlerResponse.error(f"Error: Unknown tool: {tool_name}")

        try:
            active = await self.ensure_credential(credential)
        except TokenRetrievalError as e:
            logger.warning("No credential available", error=str(e))
            return HandlerResponse.error(f"Error: {e}\n\n{AUTH_GUIDANCE}")
        except Exception as e:
            logger.error("Credential resolution failed", error=str(e), exc_info=True)
            return HandlerResponse.error(
                f"Error: Unable to resolve Auth0 credentials: {e}\n\n{AUTH_GUIDANCE}"
            )

        logger.debug(
            "Executing tool",
            tenant=active.tenant_label,
            parameters=redact_sensitive(parameters)
        )

        try:
            response = await handler.execute(
                HandlerRequest(token=active.token, parameters=parameters),
                HandlerConfig(domain=active.domain)
            )
        except Exception as e:
            logger.error("Tool execution failed", error=str(e), exc_info=True)
            response = HandlerResponse.error(f"Error: {e}")

        logger.info(
            "Tool executed",
            is_error=response.is_error,
            execution_time_ms=round((time.time() - start_time) * 1000, 1)
        )
        return response
