"""Base classes for Management API handlers.

Every handler:
- Serves exactly one tool
- Validates its own required parameters
- Issues a single Management API request (sub-resource follow-ups aside)
- Turns every failure into an error response instead of raising
- Renders successful results as markdown
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Optional
from urllib.parse import quote

import httpx

from shared.logging import get_logger
from shared.models import HandlerConfig, HandlerRequest, HandlerResponse, ToolDefinition
from resources.client import APIRequest, APIResponse, ManagementAPI
from resources.errors import (
    classify_network_error,
    describe_http_failure,
    describe_network_failure,
)
from resources.formatting import id_reference, markdown_table, pagination_hint
from resources.parsing import ListPage, ShapeMismatch, as_count, parse_list_response

logger = get_logger(__name__)

INVALID_FORMAT = "Error: Received invalid response format from Auth0 API."


class MissingParameterError(ValueError):
    """A required tool parameter was not supplied."""

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} is required")
        self.name = name


class Handler(ABC):
    """
    Base class for tool handlers.

    Subclasses declare the tool they serve and implement ``execute``.
    """

    tool: ToolDefinition

    @property
    def name(self) -> str:
        return self.tool.name.value

    @abstractmethod
    async def execute(self, request: HandlerRequest, config: HandlerConfig) -> HandlerResponse:
        """
        Run the tool.

        Args:
            request: Bearer token and caller parameters
            config: Tenant domain

        Returns:
            Success or error response, never raises for expected failures
        """
        pass


class ManagementAPIHandler(Handler):
    """
    Handler backed by one Management API call.

    Runs validate, build request, send, classify and format in that
    order. Subclasses fill in ``build_request`` and ``format_response``
    and describe the operation through class attributes used in error
    messages.
    """

    required: tuple[str, ...] = ()
    scope: str = ""
    action: str = ""

    # 404 wording for operations addressing one resource
    resource_label: str = ""
    id_param: Optional[str] = None

    # Per-status explanations replacing the generic ones
    status_hints: dict[int, str] = {}

    # Successful bodies must be a JSON object
    expects_object: bool = True

    def __init__(
        self,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        self.timeout = timeout
        self.transport = transport

    async def execute(self, request: HandlerRequest, config: HandlerConfig) -> HandlerResponse:
        params = dict(request.parameters or {})

        if not config.domain:
            return HandlerResponse.error("Error: AUTH0_DOMAIN environment variable is not set")

        try:
            self.validate(params)
        except MissingParameterError as e:
            logger.debug("Missing parameter", tool=self.name, parameter=e.name)
            return HandlerResponse.error(f"Error: {e}")

        api = ManagementAPI(
            config.domain,
            request.token,
            timeout=self.timeout,
            transport=self.transport
        )
        api_request = self.build_request(params)

        try:
            response = await api.send(api_request)
        except (httpx.TransportError, asyncio.TimeoutError, OSError) as e:
            logger.warning(
                "Management API unreachable",
                tool=self.name,
                kind=classify_network_error(e).value,
                error=str(e)
            )
            return HandlerResponse.error(describe_network_failure(e, config.domain))

        if not response.ok:
            logger.warning(
                "Management API request failed",
                tool=self.name,
                status=response.status_code,
                body=response.text[:500]
            )
            return HandlerResponse.error(self.describe_failure(response, params))

        if not response.decoded:
            logger.warning("Management API returned invalid JSON", tool=self.name)
            return HandlerResponse.error(INVALID_FORMAT)

        return await self.complete(api, response, params)

    def validate(self, params: dict[str, Any]) -> None:
        """Raise ``MissingParameterError`` for the first absent required parameter."""
        for name in self.required:
            value = params.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise MissingParameterError(name)

    @abstractmethod
    def build_request(self, params: dict[str, Any]) -> APIRequest:
        """Translate tool parameters into a Management API request."""
        pass

    @abstractmethod
    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        """Render a successful response body."""
        pass

    async def complete(
        self,
        api: ManagementAPI,
        response: APIResponse,
        params: dict[str, Any]
    ) -> HandlerResponse:
        """Finish a successful call. Override to issue follow-up requests."""
        if self.expects_object and not isinstance(response.body, dict):
            logger.warning("Expected a JSON object", tool=self.name, body_type=type(response.body).__name__)
            return HandlerResponse.error(INVALID_FORMAT)
        return self.format_response(response.body, params)

    def not_found_message(self, params: dict[str, Any]) -> Optional[str]:
        if not self.id_param:
            return None
        return f"{self.resource_label} with {self.id_param} '{params.get(self.id_param)}' not found."

    def describe_failure(self, response: APIResponse, params: dict[str, Any]) -> str:
        return describe_http_failure(
            response.status_code,
            response.reason,
            action=self.action,
            scope=self.scope,
            not_found=self.not_found_message(params),
            hints=self.status_hints,
            body=response.body
        )

    def resource_path(self, prefix: str, params: dict[str, Any], suffix: str = "") -> str:
        """Build ``prefix/<id>suffix`` with the identifier URL-encoded."""
        identifier = quote(str(params[self.id_param]), safe="")
        return f"{prefix}/{identifier}{suffix}"


def paging_params(
    params: dict[str, Any],
    default_per_page: int,
    max_per_page: Optional[int] = None
) -> tuple[int, int]:
    """Return ``(page, per_page)`` with defaults and the upper bound applied."""
    page = as_count(params.get("page"))
    per_page = as_count(params.get("per_page"))
    page = page if page is not None else 0
    per_page = per_page if per_page else default_per_page
    if max_per_page is not None:
        per_page = min(per_page, max_per_page)
    return page, per_page


def pick(params: dict[str, Any], *names: str) -> dict[str, Any]:
    """Copy the given parameters that were actually supplied."""
    return {name: params[name] for name in names if params.get(name) is not None}


class ListHandler(ManagementAPIHandler):
    """
    Handler for operations returning a list of resources.

    Renders a header with the shown and total counts, a table, a
    pagination hint and the id reference list.
    """

    expects_object = False

    list_key: str = ""
    title: str = ""
    empty_message: str = "No results found."
    columns: list[str] = []
    reference_kind: str = ""

    def row(self, item: dict[str, Any]) -> list[Any]:
        raise NotImplementedError

    def reference(self, item: dict[str, Any]) -> tuple[Any, Any]:
        return item.get("name"), item.get("id")

    def header(self, page: ListPage, params: dict[str, Any]) -> str:
        return f"### {self.title} ({len(page.items)}/{page.total})\n\n"

    def next_page_arguments(self, params: dict[str, Any]) -> dict[str, Any]:
        """Arguments repeated in the next-page example besides ``page``."""
        return {}

    def empty_text(self, params: dict[str, Any]) -> str:
        return self.empty_message

    def trailer(self, page: ListPage, params: dict[str, Any]) -> str:
        """Text placed between the pagination hint and the id reference."""
        return ""

    def footer(self, page: ListPage, params: dict[str, Any]) -> str:
        if page.total_pages <= 1:
            return ""
        return pagination_hint(
            self.name,
            page.page,
            page.total_pages,
            page.per_page,
            **self.next_page_arguments(params)
        )

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        page = parse_list_response(data, self.list_key, params)
        if isinstance(page, ShapeMismatch):
            logger.warning("Unexpected list response", tool=self.name, reason=page.reason)
            return HandlerResponse.error(f"{INVALID_FORMAT} {page.reason[0].upper()}{page.reason[1:]}.")

        if not page.items:
            return HandlerResponse.success(self.empty_text(params))

        text = self.header(page, params)
        text += markdown_table(self.columns, (self.row(item) for item in page.items))
        text += self.footer(page, params)
        text += self.trailer(page, params)
        if self.reference_kind:
            text += id_reference(self.reference_kind, (self.reference(item) for item in page.items))

        logger.debug("Listed resources", tool=self.name, count=len(page.items), total=page.total)
        return HandlerResponse.success(text)


def register_handlers(
    registry,
    dispatcher,
    handler_classes: list[type[ManagementAPIHandler]],
    timeout: float = 15.0,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> list[ManagementAPIHandler]:
    """Instantiate handlers and register their tools and themselves."""
    handlers = []
    for handler_class in handler_classes:
        handler = handler_class(timeout=timeout, transport=transport)
        registry.register(handler.tool)
        dispatcher.register_handler(handler)
        handlers.append(handler)
    return handlers
