"""Applications - Auth0 clients (``/api/v2/clients``).

Tools to list, inspect, create, update, delete and search applications.
"""

import re
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from shared.logging import get_logger
from shared.models import HandlerResponse, ToolDefinition, ToolFamily, ToolName
from shared.schema import object_schema
from resources.base import (
    ListHandler,
    ManagementAPIHandler,
    paging_params,
    pick,
    register_handlers,
)
from resources.client import APIRequest
from resources.formatting import bullet, call_example
from resources.parsing import ListPage

logger = get_logger(__name__)

APP_TYPES = ["native", "spa", "regular_web", "non_interactive"]

_STRING_LIST = {"type": "array", "items": {"type": "string"}}
_PAGING = {
    "page": {"type": "number", "description": "Page number (0-based)"},
    "per_page": {"type": "number", "description": "Number of applications per page"},
    "include_totals": {"type": "boolean", "description": "Include total count"},
}
_SIMPLE_TERM = re.compile(r"^[A-Za-z0-9]+$")


def _callback_host(app: dict[str, Any]) -> Optional[str]:
    callbacks = app.get("callbacks") or []
    if not callbacks:
        return None
    return urlparse(callbacks[0]).netloc or None


def _url_section(title: str, urls: Optional[list[str]]) -> str:
    if not urls:
        return ""
    return f"#### {title}\n\n" + "".join(f"- {url}\n" for url in urls) + "\n"


def _summary(app: dict[str, Any]) -> str:
    text = bullet("Name", app.get("name"))
    text += bullet("Client ID", app.get("client_id"))
    text += bullet("Type", app.get("app_type"))
    text += bullet("Description", app.get("description"), default="No description")
    return text + "\n"


class ListApplicationsHandler(ListHandler):
    tool = ToolDefinition(
        name=ToolName.LIST_APPLICATIONS,
        family=ToolFamily.APPLICATIONS,
        description="List all applications in the Auth0 tenant",
        input_schema=object_schema(_PAGING),
    )
    scope = "read:clients"
    action = "list applications"

    list_key = "clients"
    title = "Auth0 Applications"
    empty_message = "No applications found in the Auth0 tenant."
    columns = ["Name", "Type", "Description", "Domain"]
    reference_kind = "Client"

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        page, per_page = paging_params(params, default_per_page=5)
        return APIRequest(
            "GET",
            "/clients",
            params={
                "page": page,
                "per_page": per_page,
                "include_totals": params.get("include_totals", True),
            }
        )

    def row(self, item: dict[str, Any]) -> list[Any]:
        return [
            item.get("name"),
            item.get("app_type") or "Unknown",
            item.get("description"),
            _callback_host(item),
        ]

    def reference(self, item: dict[str, Any]) -> tuple[Any, Any]:
        return item.get("name"), item.get("client_id")


class GetApplicationHandler(ManagementAPIHandler):
    tool = ToolDefinition(
        name=ToolName.GET_APPLICATION,
        family=ToolFamily.APPLICATIONS,
        description="Get details about a specific Auth0 application",
        input_schema=object_schema(
            {"client_id": {"type": "string", "description": "Client ID of the application to retrieve"}},
            required=["client_id"],
        ),
    )
    required = ("client_id",)
    scope = "read:clients"
    action = "get application"
    resource_label = "Application"
    id_param = "client_id"

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        return APIRequest("GET", self.resource_path("/clients", params))

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        text = f"### Application: {data.get('name')}\n\n"
        text += bullet("Client ID", data.get("client_id"))
        text += bullet("Type", data.get("app_type"))
        text += bullet("Description", data.get("description"), default="No description")
        text += "\n"
        if data.get("client_secret"):
            text += f"- **Client Secret**: `{data['client_secret']}`\n\n"
        text += _url_section("Callback URLs", data.get("callbacks"))
        text += _url_section("Allowed Origins", data.get("allowed_origins"))
        return HandlerResponse.success(text)


class CreateApplicationHandler(ManagementAPIHandler):
    tool = ToolDefinition(
        name=ToolName.CREATE_APPLICATION,
        family=ToolFamily.APPLICATIONS,
        description="Create a new Auth0 application",
        input_schema=object_schema(
            {
                "name": {"type": "string", "description": "Name of the application"},
                "app_type": {
                    "type": "string",
                    "description": "Type of application (native, spa, regular_web, non_interactive)",
                    "enum": APP_TYPES,
                },
                "description": {"type": "string", "description": "Description of the application"},
                "callbacks": {**_STRING_LIST, "description": "Allowed callback URLs"},
                "allowed_origins": {**_STRING_LIST, "description": "Allowed origins for CORS"},
            },
            required=["name", "app_type"],
        ),
    )
    required = ("name", "app_type")
    scope = "create:clients"
    action = "create application"
    status_hints = {
        422: "Validation error. Check the application name, type and URLs you provided.",
    }

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        body = pick(params, "name", "app_type", "description", "callbacks", "allowed_origins")
        return APIRequest("POST", "/clients", json=body)

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        text = "### Application Created Successfully\n\n" + _summary(data)
        if data.get("client_secret"):
            text += f"- **Client Secret**: `{data['client_secret']}`\n\n"
            text += "**Important**: Save the client secret as it won't be accessible again.\n\n"
        text += _url_section("Callback URLs", data.get("callbacks"))
        text += _url_section("Allowed Origins", data.get("allowed_origins"))
        return HandlerResponse.success(text)


class UpdateApplicationHandler(ManagementAPIHandler):
    tool = ToolDefinition(
        name=ToolName.UPDATE_APPLICATION,
        family=ToolFamily.APPLICATIONS,
        description="Update an existing Auth0 application",
        input_schema=object_schema(
            {
                "client_id": {"type": "string", "description": "Client ID of the application to update"},
                "name": {"type": "string", "description": "New name of the application"},
                "description": {"type": "string", "description": "New description of the application"},
                "callbacks": {**_STRING_LIST, "description": "New allowed callback URLs"},
                "allowed_origins": {**_STRING_LIST, "description": "New allowed origins for CORS"},
            },
            required=["client_id"],
        ),
    )
    required = ("client_id",)
    scope = "update:clients"
    action = "update application"
    resource_label = "Application"
    id_param = "client_id"

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        body = pick(params, "name", "description", "callbacks", "allowed_origins")
        return APIRequest("PATCH", self.resource_path("/clients", params), json=body)

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        text = "### Application Updated Successfully\n\n" + _summary(data)
        text += _url_section("Callback URLs", data.get("callbacks"))
        text += _url_section("Allowed Origins", data.get("allowed_origins"))
        return HandlerResponse.success(text)


class DeleteApplicationHandler(ManagementAPIHandler):
    tool = ToolDefinition(
        name=ToolName.DELETE_APPLICATION,
        family=ToolFamily.APPLICATIONS,
        description="Delete an Auth0 application",
        input_schema=object_schema(
            {"client_id": {"type": "string", "description": "Client ID of the application to delete"}},
            required=["client_id"],
        ),
    )
    required = ("client_id",)
    scope = "delete:clients"
    action = "delete application"
    resource_label = "Application"
    id_param = "client_id"
    expects_object = False

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        return APIRequest("DELETE", self.resource_path("/clients", params))

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        return HandlerResponse.success(
            "### Application Deleted Successfully\n\n"
            f"Application with client_id '{params['client_id']}' has been deleted."
        )


def search_query(term: str) -> str:
    """
    Build the v3 search query for an application name.

    Simple alphanumeric terms become a prefix search; anything else is
    matched exactly.
    """
    if _SIMPLE_TERM.match(term):
        return f"name:{term}*"
    escaped = term.replace('"', '\\"')
    return f'name:"{escaped}"'


class SearchApplicationsHandler(ListHandler):
    tool = ToolDefinition(
        name=ToolName.SEARCH_APPLICATIONS,
        family=ToolFamily.APPLICATIONS,
        description="Search for Auth0 applications by name",
        input_schema=object_schema(
            {
                "name": {"type": "string", "description": "Name or partial name to search for"},
                **_PAGING,
            },
            required=["name"],
        ),
    )
    required = ("name",)
    scope = "read:clients"
    action = "search applications"

    list_key = "clients"
    columns = ["Name", "Client ID", "Type", "Description"]
    reference_kind = "Client"

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        page, per_page = paging_params(params, default_per_page=10)
        return APIRequest(
            "GET",
            "/clients",
            params={
                "q": search_query(params["name"]),
                "search_engine": "v3",
                "page": page,
                "per_page": per_page,
                "include_totals": params.get("include_totals", True),
            }
        )

    def empty_text(self, params: dict[str, Any]) -> str:
        return f'No applications found matching the name "{params["name"]}".'

    def trailer(self, page: ListPage, params: dict[str, Any]) -> str:
        example = call_example(ToolName.GET_APPLICATION.value, client_id="client_id")
        return f"\nTo view details of a specific application, use: {example}\n"

    def header(self, page: ListPage, params: dict[str, Any]) -> str:
        return f'### Auth0 Applications Matching "{params["name"]}" ({len(page.items)}/{page.total})\n\n'

    def next_page_arguments(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"name": params["name"]}

    def row(self, item: dict[str, Any]) -> list[Any]:
        return [
            item.get("name"),
            item.get("client_id"),
            item.get("app_type") or "Unknown",
            item.get("description"),
        ]

    def reference(self, item: dict[str, Any]) -> tuple[Any, Any]:
        return item.get("name"), item.get("client_id")


HANDLERS = [
    ListApplicationsHandler,
    GetApplicationHandler,
    CreateApplicationHandler,
    UpdateApplicationHandler,
    DeleteApplicationHandler,
    SearchApplicationsHandler,
]


def register_applications(
    registry,
    dispatcher,
    timeout: float = 15.0,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> None:
    """Register the applications tools with the registry and dispatcher."""
    handlers = register_handlers(registry, dispatcher, HANDLERS, timeout, transport)
    logger.info("Applications family registered", tool_count=len(handlers))
