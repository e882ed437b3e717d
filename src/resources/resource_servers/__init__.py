"""Resource Servers - APIs registered in the tenant (``/api/v2/resource-servers``)."""

from typing import Any, Optional

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
from resources.formatting import bullet, markdown_table

logger = get_logger(__name__)

_SCOPES = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "value": {"type": "string", "description": "The scope value (e.g., read:users)"},
            "description": {"type": "string", "description": "Description of what the scope allows"},
        },
        "required": ["value"],
    },
    "description": "Array of scopes that define the permissions for the API",
}
_TOKEN_LIFETIME = {"type": "number", "description": "Token lifetime in seconds"}
_OFFLINE_ACCESS = {
    "type": "boolean",
    "description": "Whether to allow offline access (refresh tokens)",
}


def _details(server: dict[str, Any], heading: str) -> str:
    text = f"### {heading}\n\n"
    text += bullet("Name", server.get("name"))
    text += bullet("ID", server.get("id"))
    text += bullet("Identifier", server.get("identifier"))
    text += bullet("Signing Algorithm", server.get("signing_alg"))
    lifetime = server.get("token_lifetime")
    text += bullet("Token Lifetime", f"{lifetime} seconds" if lifetime else "Default")
    text += bullet("Allow Offline Access", bool(server.get("allow_offline_access")))
    text += "\n"

    scopes = server.get("scopes") or []
    if scopes:
        text += f"#### Scopes ({len(scopes)})\n\n"
        text += markdown_table(
            ["Scope", "Description"],
            ([f"`{s.get('value')}`", s.get("description")] for s in scopes)
        )
        text += "\n"
    else:
        text += "#### Scopes\n\nNo scopes defined for this resource server.\n\n"
    return text


class ListResourceServersHandler(ListHandler):
    tool = ToolDefinition(
        name=ToolName.LIST_RESOURCE_SERVERS,
        family=ToolFamily.RESOURCE_SERVERS,
        description="List all resource servers (APIs) in the Auth0 tenant",
        input_schema=object_schema({
            "page": {"type": "number", "description": "Page number (0-based)"},
            "per_page": {"type": "number", "description": "Number of resource servers per page"},
            "include_totals": {"type": "boolean", "description": "Include total count"},
        }),
    )
    scope = "read:resource_servers"
    action = "list resource servers"

    list_key = "resource_servers"
    title = "Auth0 Resource Servers"
    empty_message = "No resource servers found in the Auth0 tenant."
    columns = ["Name", "Identifier", "Scopes"]
    reference_kind = "Resource Server"

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        page, per_page = paging_params(params, default_per_page=5)
        return APIRequest(
            "GET",
            "/resource-servers",
            params={
                "page": page,
                "per_page": per_page,
                "include_totals": params.get("include_totals", True),
            }
        )

    def row(self, item: dict[str, Any]) -> list[Any]:
        return [item.get("name"), item.get("identifier"), str(len(item.get("scopes") or []))]


class GetResourceServerHandler(ManagementAPIHandler):
    tool = ToolDefinition(
        name=ToolName.GET_RESOURCE_SERVER,
        family=ToolFamily.RESOURCE_SERVERS,
        description="Get details about a specific Auth0 resource server",
        input_schema=object_schema(
            {"id": {"type": "string", "description": "ID of the resource server to retrieve"}},
            required=["id"],
        ),
    )
    required = ("id",)
    scope = "read:resource_servers"
    action = "get resource server"
    resource_label = "Resource server"
    id_param = "id"

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        return APIRequest("GET", self.resource_path("/resource-servers", params))

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        return HandlerResponse.success(_details(data, f"Resource Server: {data.get('name')}"))


class CreateResourceServerHandler(ManagementAPIHandler):
    tool = ToolDefinition(
        name=ToolName.CREATE_RESOURCE_SERVER,
        family=ToolFamily.RESOURCE_SERVERS,
        description="Create a new Auth0 resource server (API)",
        input_schema=object_schema(
            {
                "name": {"type": "string", "description": "Name of the resource server"},
                "identifier": {
                    "type": "string",
                    "description": "Unique identifier for the API (usually a URL)",
                },
                "scopes": _SCOPES,
                "signing_alg": {
                    "type": "string",
                    "description": "Algorithm used to sign tokens",
                    "enum": ["HS256", "RS256"],
                },
                "token_lifetime": _TOKEN_LIFETIME,
                "allow_offline_access": _OFFLINE_ACCESS,
            },
            required=["name", "identifier"],
        ),
    )
    required = ("name", "identifier")
    scope = "create:resource_servers"
    action = "create resource server"
    status_hints = {
        409: "A resource server with this identifier already exists.",
        422: "Validation error. Check the identifier, scopes and token settings you provided.",
    }

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        body = pick(
            params,
            "name",
            "identifier",
            "scopes",
            "signing_alg",
            "token_lifetime",
            "allow_offline_access",
        )
        return APIRequest("POST", "/resource-servers", json=body)

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        return HandlerResponse.success(_details(data, "Resource Server Created Successfully"))


class UpdateResourceServerHandler(ManagementAPIHandler):
    tool = ToolDefinition(
        name=ToolName.UPDATE_RESOURCE_SERVER,
        family=ToolFamily.RESOURCE_SERVERS,
        description="Update an existing Auth0 resource server",
        input_schema=object_schema(
            {
                "id": {"type": "string", "description": "ID of the resource server to update"},
                "name": {"type": "string", "description": "New name of the resource server"},
                "scopes": _SCOPES,
                "token_lifetime": _TOKEN_LIFETIME,
                "allow_offline_access": _OFFLINE_ACCESS,
            },
            required=["id"],
        ),
    )
    required = ("id",)
    scope = "update:resource_servers"
    action = "update resource server"
    resource_label = "Resource server"
    id_param = "id"
    status_hints = {
        422: "Validation error. Check the scopes and token settings you provided.",
    }

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        body = pick(params, "name", "scopes", "token_lifetime", "allow_offline_access")
        return APIRequest("PATCH", self.resource_path("/resource-servers", params), json=body)

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        return HandlerResponse.success(_details(data, "Resource Server Updated Successfully"))


class DeleteResourceServerHandler(ManagementAPIHandler):
    tool = ToolDefinition(
        name=ToolName.DELETE_RESOURCE_SERVER,
        family=ToolFamily.RESOURCE_SERVERS,
        description="Delete an Auth0 resource server",
        input_schema=object_schema(
            {"id": {"type": "string", "description": "ID of the resource server to delete"}},
            required=["id"],
        ),
    )
    required = ("id",)
    scope = "delete:resource_servers"
    action = "delete resource server"
    resource_label = "Resource server"
    id_param = "id"
    expects_object = False
    status_hints = {
        403: (
            "Forbidden. You cannot delete the Auth0 Management API resource server, "
            "or your token is missing the delete:resource_servers scope."
        ),
    }

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        return APIRequest("DELETE", self.resource_path("/resource-servers", params))

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        return HandlerResponse.success(
            "### Resource Server Deleted Successfully\n\n"
            f"Resource server with id '{params['id']}' has been deleted."
        )


HANDLERS = [
    ListResourceServersHandler,
    GetResourceServerHandler,
    CreateResourceServerHandler,
    UpdateResourceServerHandler,
    DeleteResourceServerHandler,
]


def register_resource_servers(
    registry,
    dispatcher,
    timeout: float = 15.0,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> None:
    """Register the resource server tools with the registry and dispatcher."""
    handlers = register_handlers(registry, dispatcher, HANDLERS, timeout, transport)
    logger.info("Resource servers family registered", tool_count=len(handlers))
