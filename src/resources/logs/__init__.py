"""Logs - tenant log events (``/api/v2/logs``).

Listing uses checkpoint paging (``from``/``take``); search builds a
Lucene query and uses page based paging.
"""

from typing import Any, Optional

import httpx

from shared.logging import get_logger
from shared.models import HandlerResponse, ToolDefinition, ToolFamily, ToolName
from shared.schema import object_schema
from resources.base import (
    ListHandler,
    ManagementAPIHandler,
    paging_params,
    register_handlers,
)
from resources.client import APIRequest
from resources.formatting import bullet, call_example, format_timestamp, json_block, pagination_hint
from resources.parsing import ListPage, ListShape, as_count

logger = get_logger(__name__)

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 10
DEFAULT_SORT = "date:-1"

_SEARCH_FILTERS = ("user_id", "client_id", "type", "from", "to")


def log_id(entry: dict[str, Any]) -> Optional[str]:
    return entry.get("log_id") or entry.get("_id")


def _user(entry: dict[str, Any]) -> Optional[str]:
    return entry.get("user_name") or entry.get("user_id")


def build_search_query(params: dict[str, Any]) -> Optional[str]:
    """
    Combine the search filters into a Lucene query.

    Field filters are quoted; ``from``/``to`` become one date range with
    ``*`` standing in for an open end.
    """
    parts = []
    for field in ("user_id", "client_id", "type"):
        if params.get(field):
            parts.append(f'{field}:"{params[field]}"')
    if params.get("from") or params.get("to"):
        parts.append(f"date:[{params.get('from') or '*'} TO {params.get('to') or '*'}]")
    return " AND ".join(parts) or None


class _LogTableMixin:
    list_key = "logs"
    columns = ["Date", "Type", "Description", "User"]

    def row(self, item: dict[str, Any]) -> list[Any]:
        return [
            format_timestamp(item.get("date")),
            item.get("type") or "Unknown",
            item.get("description") or "No description",
            _user(item),
        ]

    def header(self, page: ListPage, params: dict[str, Any]) -> str:
        count = f"{len(page.items)}/{page.total}" if page.total > len(page.items) else str(len(page.items))
        return f"### {self.title} ({count})\n\n"

    def trailer(self, page: ListPage, params: dict[str, Any]) -> str:
        example = call_example(ToolName.GET_LOG.value, id="log_id")
        return f"\nTo view details of a specific log, use: {example}\n"


class ListLogsHandler(_LogTableMixin, ListHandler):
    tool = ToolDefinition(
        name=ToolName.LIST_LOGS,
        family=ToolFamily.LOGS,
        description="List logs from the Auth0 tenant",
        input_schema=object_schema({
            "from": {"type": "string", "description": "Log ID to start from"},
            "take": {"type": "number", "description": "Number of logs to retrieve (max 100)"},
            "q": {"type": "string", "description": "Query in Lucene query string syntax"},
            "sort": {
                "type": "string",
                "description": "Field to sort by",
                "enum": ["date:1", "date:-1"],
            },
            "include_fields": {"type": "boolean", "description": "Whether to include all fields"},
            "include_totals": {"type": "boolean", "description": "Whether to include totals"},
        }),
    )
    scope = "read:logs"
    action = "list logs"

    title = "Auth0 Logs"
    empty_message = "No logs found in the Auth0 tenant."

    def _take(self, params: dict[str, Any]) -> int:
        take = as_count(params.get("take")) or DEFAULT_PAGE_SIZE
        return min(take, MAX_PAGE_SIZE)

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        return APIRequest(
            "GET",
            "/logs",
            params={
                "from": params.get("from") or None,
                "take": self._take(params),
                "q": params.get("q") or None,
                "sort": params.get("sort") or DEFAULT_SORT,
                "include_fields": params.get("include_fields"),
                # Totals are not available with checkpoint paging
                "include_totals": None if params.get("from") else params.get("include_totals", True),
            }
        )

    def footer(self, page: ListPage, params: dict[str, Any]) -> str:
        # Checkpoint reads return a bare array without totals
        more = page.total > len(page.items) or (
            page.shape == ListShape.BARE_ARRAY and len(page.items) >= self._take(params)
        )
        if not more:
            return ""
        last = log_id(page.items[-1])
        if page.total > len(page.items):
            text = f"\n*Showing {len(page.items)} of {page.total} logs*\n"
        else:
            text = f"\n*Showing {len(page.items)} logs*\n"
        take = self._take(params) if params.get("take") is not None else None
        text += f"\nTo see more logs, use: {call_example(self.name, **{'from': last}, take=take)}\n"
        return text


class GetLogHandler(ManagementAPIHandler):
    tool = ToolDefinition(
        name=ToolName.GET_LOG,
        family=ToolFamily.LOGS,
        description="Get a specific log entry by ID",
        input_schema=object_schema(
            {"id": {"type": "string", "description": "ID of the log entry to retrieve"}},
            required=["id"],
        ),
    )
    required = ("id",)
    scope = "read:logs"
    action = "get log"
    resource_label = "Log entry"
    id_param = "id"

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        return APIRequest("GET", self.resource_path("/logs", params))

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        text = f"### Log Entry: {log_id(data) or params['id']}\n\n"
        text += bullet("Date", format_timestamp(data.get("date")))
        text += bullet("Type", data.get("type"), default="Unknown")
        text += bullet("Description", data.get("description"), default="No description")
        if data.get("client_id") or data.get("client_name"):
            text += bullet("Client", f"{data.get('client_name') or ''} ({data.get('client_id') or ''})")
        if data.get("ip"):
            text += bullet("IP Address", data["ip"])
        if data.get("user_id") or data.get("user_name"):
            text += bullet("User", f"{data.get('user_name') or ''} ({data.get('user_id') or ''})")
        text += "\n"

        if data.get("details"):
            text += "#### Details\n\n" + json_block(data["details"]) + "\n"

        text += "#### Raw Log Data\n\n" + json_block(data)
        return HandlerResponse.success(text)


class SearchLogsHandler(_LogTableMixin, ListHandler):
    tool = ToolDefinition(
        name=ToolName.SEARCH_LOGS,
        family=ToolFamily.LOGS,
        description="Search logs with specific criteria",
        input_schema=object_schema({
            "user_id": {"type": "string", "description": "Filter logs by user ID"},
            "client_id": {"type": "string", "description": "Filter logs by client ID"},
            "type": {"type": "string", "description": 'Filter logs by type (e.g., "s", "f", "fp", etc.)'},
            "from": {"type": "string", "description": "Start date (ISO format)"},
            "to": {"type": "string", "description": "End date (ISO format)"},
            "page": {"type": "number", "description": "Page number"},
            "per_page": {"type": "number", "description": "Items per page (max 100)"},
            "include_totals": {"type": "boolean", "description": "Whether to include totals"},
        }),
    )
    scope = "read:logs"
    action = "search logs"

    title = "Auth0 Logs Search Results"
    empty_message = "No logs found matching the search criteria."

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        page, per_page = paging_params(params, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)
        return APIRequest(
            "GET",
            "/logs",
            params={
                "q": build_search_query(params),
                "page": page,
                "per_page": per_page,
                "include_totals": params.get("include_totals", True),
                "sort": DEFAULT_SORT,
            }
        )

    def header(self, page: ListPage, params: dict[str, Any]) -> str:
        text = super().header(page, params)
        query = build_search_query(params)
        if query:
            text += f"**Search criteria**: `{query}`\n\n"
        return text

    def footer(self, page: ListPage, params: dict[str, Any]) -> str:
        if page.total_pages <= 1:
            return ""
        filters = {name: params[name] for name in _SEARCH_FILTERS if params.get(name)}
        return pagination_hint(
            self.name,
            page.page,
            page.total_pages,
            page.per_page,
            total=page.total,
            **filters
        )


HANDLERS = [
    ListLogsHandler,
    GetLogHandler,
    SearchLogsHandler,
]


def register_logs(
    registry,
    dispatcher,
    timeout: float = 15.0,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> None:
    """Register the log tools with the registry and dispatcher."""
    handlers = register_handlers(registry, dispatcher, HANDLERS, timeout, transport)
    logger.info("Logs family registered", tool_count=len(handlers))
