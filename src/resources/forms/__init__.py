"""Forms - Universal Login forms (``/api/v2/branding/forms``)."""

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
from resources.formatting import bullet, call_example, json_block
from resources.parsing import ListPage

logger = get_logger(__name__)

FORM_TYPES = ["login", "signup", "reset-password", "mfa", "custom"]


def _publish_note(form_id: Any, what: str) -> str:
    example = call_example(ToolName.PUBLISH_FORM.value, id=str(form_id))
    return f"**Note**: {what} Use {example} to publish it.\n\n"


def _summary(form: dict[str, Any], heading: str, status_default: str) -> str:
    text = f"### {heading}\n\n"
    text += bullet("Name", form.get("name"))
    text += bullet("ID", form.get("id"))
    text += bullet("Type", form.get("type"))
    text += bullet("Status", form.get("status"), default=status_default)
    text += bullet("Published", bool(form.get("is_published")))
    if form.get("client_id"):
        text += bullet("Client ID", form["client_id"])
    if form.get("template_id"):
        text += bullet("Template ID", form["template_id"])
    return text + "\n"


class ListFormsHandler(ListHandler):
    tool = ToolDefinition(
        name=ToolName.LIST_FORMS,
        family=ToolFamily.FORMS,
        description="List all forms in the Auth0 tenant",
        input_schema=object_schema({
            "page": {"type": "number", "description": "Page number (0-based)"},
            "per_page": {"type": "number", "description": "Number of forms per page"},
            "include_totals": {"type": "boolean", "description": "Include total count"},
            "type": {"type": "string", "description": "Filter by form type", "enum": FORM_TYPES},
        }),
    )
    scope = "read:branding"
    action = "list forms"

    list_key = "forms"
    title = "Auth0 Forms"
    columns = ["Name", "Type", "Status", "Published"]
    reference_kind = "Form"

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        page, per_page = paging_params(params, default_per_page=10)
        return APIRequest(
            "GET",
            "/branding/forms",
            params={
                "page": page,
                "per_page": per_page,
                "include_totals": params.get("include_totals", True),
                "type": params.get("type"),
            }
        )

    def empty_text(self, params: dict[str, Any]) -> str:
        if params.get("type"):
            return f'No forms of type "{params["type"]}" found in the Auth0 tenant.'
        return "No forms found in the Auth0 tenant."

    def next_page_arguments(self, params: dict[str, Any]) -> dict[str, Any]:
        return pick(params, "type")

    def trailer(self, page: ListPage, params: dict[str, Any]) -> str:
        example = call_example(ToolName.GET_FORM.value, id="form_id")
        return f"\nTo view details of a specific form, use: {example}\n"

    def row(self, item: dict[str, Any]) -> list[Any]:
        return [
            item.get("name") or "Unnamed",
            item.get("type") or "Unknown",
            item.get("status") or "Unknown",
            bool(item.get("is_published")),
        ]


class GetFormHandler(ManagementAPIHandler):
    tool = ToolDefinition(
        name=ToolName.GET_FORM,
        family=ToolFamily.FORMS,
        description="Get details about a specific Auth0 form",
        input_schema=object_schema(
            {"id": {"type": "string", "description": "ID of the form to retrieve"}},
            required=["id"],
        ),
    )
    required = ("id",)
    scope = "read:branding"
    action = "get form"
    resource_label = "Form"
    id_param = "id"

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        return APIRequest("GET", self.resource_path("/branding/forms", params))

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        form_id = data.get("id") or params["id"]
        text = _summary(data, f"Form: {data.get('name')}", status_default="Unknown")

        if data.get("content"):
            text += "#### Form Content\n\n" + json_block(data["content"]) + "\n"

        text += "#### Available Actions\n\n"
        text += f"- Update this form: `{ToolName.UPDATE_FORM.value}(id=\"{form_id}\", ...)`\n"
        text += f"- Delete this form: {call_example(ToolName.DELETE_FORM.value, id=str(form_id))}\n"
        if not data.get("is_published"):
            text += f"- Publish this form: {call_example(ToolName.PUBLISH_FORM.value, id=str(form_id))}\n"
        return HandlerResponse.success(text)


class CreateFormHandler(ManagementAPIHandler):
    tool = ToolDefinition(
        name=ToolName.CREATE_FORM,
        family=ToolFamily.FORMS,
        description="Create a new Auth0 form",
        input_schema=object_schema(
            {
                "name": {"type": "string", "description": "Name of the form"},
                "type": {"type": "string", "description": "Type of form", "enum": FORM_TYPES},
                "template_id": {"type": "string", "description": "ID of the template to use"},
                "client_id": {"type": "string", "description": "Client ID to associate with the form"},
                "content": {"type": "object", "description": "Form content and configuration"},
            },
            required=["name", "type"],
        ),
    )
    required = ("name", "type")
    scope = "create:branding"
    action = "create form"
    status_hints = {
        422: "Validation error. Check the form type and content you provided.",
    }

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        body = pick(params, "name", "type", "template_id", "client_id", "content")
        return APIRequest("POST", "/branding/forms", json=body)

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        text = _summary(data, "Form Created Successfully", status_default="Draft")
        text += _publish_note(data.get("id"), "The form has been created but is not published yet.")
        return HandlerResponse.success(text)


class UpdateFormHandler(ManagementAPIHandler):
    tool = ToolDefinition(
        name=ToolName.UPDATE_FORM,
        family=ToolFamily.FORMS,
        description="Update an existing Auth0 form",
        input_schema=object_schema(
            {
                "id": {"type": "string", "description": "ID of the form to update"},
                "name": {"type": "string", "description": "New name of the form"},
                "content": {"type": "object", "description": "Updated form content and configuration"},
            },
            required=["id"],
        ),
    )
    required = ("id",)
    scope = "update:branding"
    action = "update form"
    resource_label = "Form"
    id_param = "id"
    status_hints = {
        422: "Validation error. Check the form content you provided.",
    }

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        body = pick(params, "name", "content")
        return APIRequest("PATCH", self.resource_path("/branding/forms", params), json=body)

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        text = _summary(data, "Form Updated Successfully", status_default="Draft")
        if not data.get("is_published"):
            text += _publish_note(
                data.get("id") or params["id"],
                "The form has been updated but changes are not published."
            )
        return HandlerResponse.success(text)


class DeleteFormHandler(ManagementAPIHandler):
    tool = ToolDefinition(
        name=ToolName.DELETE_FORM,
        family=ToolFamily.FORMS,
        description="Delete an Auth0 form",
        input_schema=object_schema(
            {"id": {"type": "string", "description": "ID of the form to delete"}},
            required=["id"],
        ),
    )
    required = ("id",)
    scope = "delete:branding"
    action = "delete form"
    resource_label = "Form"
    id_param = "id"
    expects_object = False

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        return APIRequest("DELETE", self.resource_path("/branding/forms", params))

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        return HandlerResponse.success(
            "### Form Deleted Successfully\n\n"
            f"Form with id '{params['id']}' has been deleted."
        )


class PublishFormHandler(ManagementAPIHandler):
    tool = ToolDefinition(
        name=ToolName.PUBLISH_FORM,
        family=ToolFamily.FORMS,
        description="Publish an Auth0 form",
        input_schema=object_schema(
            {"id": {"type": "string", "description": "ID of the form to publish"}},
            required=["id"],
        ),
    )
    required = ("id",)
    scope = "update:branding"
    action = "publish form"
    resource_label = "Form"
    id_param = "id"
    status_hints = {
        422: "The form has validation errors and cannot be published. Check the form content.",
    }

    def build_request(self, params: dict[str, Any]) -> APIRequest:
        return APIRequest("POST", self.resource_path("/branding/forms", params, "/publish"))

    def format_response(self, data: Any, params: dict[str, Any]) -> HandlerResponse:
        return HandlerResponse.success(
            _summary(data, "Form Published Successfully", status_default="Published")
        )


HANDLERS = [
    ListFormsHandler,
    GetFormHandler,
    CreateFormHandler,
    UpdateFormHandler,
    DeleteFormHandler,
    PublishFormHandler,
]


def register_forms(
    registry,
    dispatcher,
    timeout: float = 15.0,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> None:
    """Register the form tools with the registry and dispatcher."""
    handlers = register_handlers(registry, dispatcher, HANDLERS, timeout, transport)
    logger.info("Forms family registered", tool_count=len(handlers))
