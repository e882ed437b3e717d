"""Actions - custom code run on Auth0 triggers (``/api/v2/actions/actions``).

Tools to list, inspect, create, update, delete and deploy actions. Secret
updates are sent one at a time after the main update and reported
individually.
"""

import asyncio
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
from resources.client import APIRequest, APIResponse, ManagementAPI
from resources.errors import describe_network_failure, upstream_message
from resources.formatting import bullet, call_example, markdown_table

logger = get_logger(__name__)

DEFAULT_RUNTIME = "node18"
TRIGGER_VERSION = "v2"

_DEPENDENCIES = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "name": {"type": "string", "description": "Name of the dependency"},
            "version": {"type": "string", "description": "Version of the dependency"},
        },
        "required": ["name", "version"],
    },
}
_SECRET = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "Name of the secret"},
        "value": {"type": "string", "description": "Value of the secret"},
    },
}


def _trigger(action: dict[str, Any]) -> Optional[str]:
    triggers = action.get("supported_triggers") or []
    if triggers and isinstance(triggers[0], dict):
        return triggers[0].get("id")
    return None


def _dependencies_section(action: dict[str, Any]) -> str:
    dependencies = action.get("dependencies") or []
    if not dependencies:
        return ""
    text = f"#### Dependencies ({len(dependencies)})\n\n"
    text += markdown_table(
        ["Package", "Version"],
        ([d.get("name"), d.get("version")] for d in dependencies)
    )
    return text + "\n"


def _summary(action: dict[str, Any], heading: str, status_default: str) -> str:
    text = f"### {heading}\n\n"
    text += bullet("Name", action.get("name"))
    text += bullet("ID", action.get("id"))
    text += bullet("Trigger", _trigger(action))
    text += bullet("Status", action.get("status"), default=status_default)
    text += bullet("Runtime", action.get("runtime"), default="Unknown")
    return text + "\n"


def _deploy_note(action_id: Any, what: str) -> str:
    example = call_example(ToolName.DEPLOY_ACTION.value, id=str(action_id))
    return f"**Note**: {what} Use {example} to deploy it.\n\n"


class ListActionsHandler(ListHandler):
    tool = ToolDefinition(
        name=ToolName.LIST_ACTIONS,
        family=ToolFamily.ACTIONS,
        description="List all actions in the Auth0 tenant",
        input_schema=object_schema({
            "page": {"type": "number", "description": "Page number (0-based)"},
            "per_page": {"type": "number", "description": "Number of actions per page"},
            "include_totals": {"type": "boolean", "description": "Include total count"},
            "trigger_id": {"type": "string", "description": "Filter by trigger ID"},
        }),
    )
    scope = "read:actions"
    action = "list actions"

    list_key = "actions"
    title = "Auth0 Actions"
    empty_message = "No actions found in the Auth0 tenant."
    columns = ["Name", "Trigger", "Status", "Runtime"]
    reference_kind = "Action"

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        page, per_page = paging_params(params, default_per_page=5)
        return APIRequest(
            "GET",
            "/actions/actions",
            params={
                "page": page,
                "per_page": per_page,
                "include_totals": params.get("include_totals", True),
                "triggerId": params.get("trigger_id"),
            }
        )

    def next_page_arguments(self, params: dict[str, Any]) -> dict[str, Any]:
        return pick(params, "trigger_id")

    def row(self, item: dict[str, Any]) -> list[Any]:
        return [
            item.get("name"),
            _trigger(item),
            item.get("status") or "Unknown",
            item.get("runtime") or "Unknown",
        ]


class GetActionHandler(ManagementAPIHandler):
    tool = ToolDefinition(
        name=ToolName.GET_ACTION,
        family=ToolFamily.ACTIONS,
        description="Get details about a specific Auth0 action",
        input_schema=object_schema(
            {"id": {"type": "string", "description": "ID of the action to retrieve"}},
            required=["id"],
        ),
    )
    required = ("id",)
    scope = "read:actions"
    action = "get action"
    resource_label = "Action"
    id_param = "id"

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        return APIRequest("GET", self.resource_path("/actions/actions", params))

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        text = _summary(data, f"Action: {data.get('name')}", status_default="Unknown")
        text += _dependencies_section(data)

        secrets = data.get("secrets") or []
        if secrets:
            text += f"#### Secrets ({len(secrets)})\n\n"
            text += markdown_table(
                ["Name", "Updated"],
                ([s.get("name"), s.get("updated_at") or "Unknown"] for s in secrets)
            )
            text += "\n"

        text += f"#### Code\n\n```javascript\n{data.get('code') or 'No code available'}\n```\n"
        return HandlerResponse.success(text)


class CreateActionHandler(ManagementAPIHandler):
    tool = ToolDefinition(
        name=ToolName.CREATE_ACTION,
        family=ToolFamily.ACTIONS,
        description="Create a new Auth0 action",
        input_schema=object_schema(
            {
                "name": {"type": "string", "description": "Name of the action"},
                "trigger_id": {"type": "string", "description": "ID of the trigger (e.g., post-login)"},
                "code": {"type": "string", "description": "JavaScript code for the action"},
                "runtime": {
                    "type": "string",
                    "description": "Runtime for the action",
                    "enum": ["node12", "node16", "node18"],
                },
                "dependencies": {**_DEPENDENCIES, "description": "NPM dependencies for the action"},
                "secrets": {
                    "type": "array",
                    "items": {**_SECRET, "required": ["name", "value"]},
                    "description": "Secrets for the action",
                },
            },
            required=["name", "trigger_id", "code"],
        ),
    )
    required = ("name", "trigger_id", "code")
    scope = "create:actions"
    action = "create action"
    status_hints = {
        422: "Validation errors in your request. Check the trigger, code and dependencies you provided.",
    }

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        body = {
            "name": params["name"],
            "supported_triggers": [{"id": params["trigger_id"], "version": TRIGGER_VERSION}],
            "code": params["code"],
            "runtime": params.get("runtime") or DEFAULT_RUNTIME,
            "dependencies": params.get("dependencies") or [],
            "secrets": params.get("secrets") or [],
        }
        return APIRequest("POST", "/actions/actions", json=body)

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        text = _summary(data, "Action Created Successfully", status_default="Draft")
        text += _dependencies_section(data)

        secrets = data.get("secrets") or []
        if secrets:
            text += f"#### Secrets ({len(secrets)})\n\n"
            text += markdown_table(["Name"], ([s.get("name")] for s in secrets))
            text += "\n"

        text += _deploy_note(data.get("id"), "The action has been created but not deployed.")
        return HandlerResponse.success(text)


class UpdateActionHandler(ManagementAPIHandler):
    tool = ToolDefinition(
        name=ToolName.UPDATE_ACTION,
        family=ToolFamily.ACTIONS,
        description="Update an existing Auth0 action",
        input_schema=object_schema(
            {
                "id": {"type": "string", "description": "ID of the action to update"},
                "name": {"type": "string", "description": "New name of the action"},
                "code": {"type": "string", "description": "New JavaScript code for the action"},
                "dependencies": {**_DEPENDENCIES, "description": "New NPM dependencies for the action"},
                "secrets": {
                    "type": "array",
                    "items": {**_SECRET, "required": ["name"]},
                    "description": "Secrets to update for the action",
                },
            },
            required=["id"],
        ),
    )
    required = ("id",)
    scope = "update:actions"
    action = "update action"
    resource_label = "Action"
    id_param = "id"
    status_hints = {
        422: "Validation errors in your request. Check that your parameters are valid.",
    }

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        body = pick(params, "name", "code", "dependencies")
        return APIRequest("PATCH", self.resource_path("/actions/actions", params), json=body)

    async def complete(
        self,
        api: ManagementAPI,
        response: APIResponse,
        params: dict[str, Any]
    ) -> HandlerResponse:
        result = await super().complete(api, response, params)
        secrets = params.get("secrets") or []
        if result.is_error or not secrets:
            return result

        updated, failed = await self._update_secrets(api, params, secrets)
        result.content[0].text += self._secrets_report(updated, failed)
        return result

    async def _update_secrets(
        self,
        api: ManagementAPI,
        params: dict[str, Any],
        secrets: list[dict[str, Any]]
    ) -> tuple[list[str], list[tuple[str, str]]]:
        """
        Send each secret in its own request.

        Failures do not stop the remaining secrets and do not fail the
        update; they are collected with a short reason.
        """
        path = self.resource_path("/actions/actions", params, "/secrets")
        updated: list[str] = []
        failed: list[tuple[str, str]] = []

        for secret in secrets:
            name = str(secret.get("name", "<unnamed>")) if isinstance(secret, dict) else "<invalid>"
            try:
                reply = await api.send(APIRequest("PATCH", path, json={"secrets": [secret]}))
            except (httpx.TransportError, asyncio.TimeoutError, OSError) as e:
                reason = describe_network_failure(e, api.domain)
                logger.warning("Secret update failed", tool=self.name, secret=name, error=str(e))
                failed.append((name, reason))
                continue

            if reply.ok:
                updated.append(name)
            else:
                reason = f"{reply.status_code} {reply.reason}".strip()
                details = upstream_message(reply.body)
                if details:
                    reason += f" ({details})"
                logger.warning(
                    "Secret update failed",
                    tool=self.name,
                    secret=name,
                    status=reply.status_code
                )
                failed.append((name, reason))

        return updated, failed

    @staticmethod
    def _secrets_report(updated: list[str], failed: list[tuple[str, str]]) -> str:
        text = "#### Secrets\n\n"
        if updated:
            text += "Updated: " + ", ".join(f"`{name}`" for name in updated) + "\n"
        if failed:
            text += "Failed to update:\n"
            text += "".join(f"- `{name}`: {reason}\n" for name, reason in failed)
        return text + "\n"

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        text = _summary(data, "Action Updated Successfully", status_default="Draft")
        text += _dependencies_section(data)
        text += _deploy_note(
            data.get("id") or params["id"],
            "The action has been updated but changes are not deployed."
        )
        return HandlerResponse.success(text)


class DeleteActionHandler(ManagementAPIHandler):
    tool = ToolDefinition(
        name=ToolName.DELETE_ACTION,
        family=ToolFamily.ACTIONS,
        description="Delete an Auth0 action",
        input_schema=object_schema(
            {"id": {"type": "string", "description": "ID of the action to delete"}},
            required=["id"],
        ),
    )
    required = ("id",)
    scope = "delete:actions"
    action = "delete action"
    resource_label = "Action"
    id_param = "id"
    expects_object = False
    status_hints = {
        409: "Cannot delete an action that is currently bound to a trigger. Remove it from the flow first.",
    }

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        return APIRequest("DELETE", self.resource_path("/actions/actions", params))

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        return HandlerResponse.success(
            "### Action Deleted Successfully\n\n"
            f"Action with id '{params['id']}' has been deleted."
        )


class DeployActionHandler(ManagementAPIHandler):
    tool = ToolDefinition(
        name=ToolName.DEPLOY_ACTION,
        family=ToolFamily.ACTIONS,
        description="Deploy an Auth0 action",
        input_schema=object_schema(
            {"id": {"type": "string", "description": "ID of the action to deploy"}},
            required=["id"],
        ),
    )
    required = ("id",)
    scope = "update:actions"
    action = "deploy action"
    resource_label = "Action"
    id_param = "id"
    status_hints = {
        422: "The action has validation errors and cannot be deployed. Check the code and dependencies.",
    }

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        return APIRequest("POST", self.resource_path("/actions/actions", params, "/deploy"))

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        text = "### Action Deployed Successfully\n\n"
        text += bullet("Name", data.get("name"))
        text += bullet("ID", data.get("id") or params["id"])
        text += bullet("Trigger", _trigger(data))
        text += bullet("Status", data.get("status"), default="Unknown")
        text += bullet("Version", data.get("version") or data.get("number"), default="Unknown")
        text += bullet("Runtime", data.get("runtime"), default="Unknown")
        return HandlerResponse.success(text)


HANDLERS = [
    ListActionsHandler,
    GetActionHandler,
    CreateActionHandler,
    UpdateActionHandler,
    DeleteActionHandler,
    DeployActionHandler,
]


def register_actions(
    registry,
    dispatcher,
    timeout: float = 15.0,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> None:
    """Register the action tools with the registry and dispatcher."""
    handlers = register_handlers(registry, dispatcher, HANDLERS, timeout, transport)
    logger.info("Actions family registered", tool_count=len(handlers))
