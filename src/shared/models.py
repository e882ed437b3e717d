"""Core data models for the Auth0 MCP server.

This module defines the structures that flow between the protocol
front-end, the request dispatcher and the Management API handlers.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ToolFamily(str, Enum):
    """Management API resource families, in catalog order."""
    APPLICATIONS = "applications"
    RESOURCE_SERVERS = "resource_servers"
    ACTIONS = "actions"
    LOGS = "logs"
    FORMS = "forms"


class ToolName(str, Enum):
    """Closed set of tool identifiers exposed over MCP."""
    LIST_APPLICATIONS = "auth0_list_applications"
    GET_APPLICATION = "auth0_get_application"
    CREATE_APPLICATION = "auth0_create_application"
    UPDATE_APPLICATION = "auth0_update_application"
    DELETE_APPLICATION = "auth0_delete_application"
    SEARCH_APPLICATIONS = "auth0_search_applications"

    LIST_RESOURCE_SERVERS = "auth0_list_resource_servers"
    GET_RESOURCE_SERVER = "auth0_get_resource_server"
    CREATE_RESOURCE_SERVER = "auth0_create_resource_server"
    UPDATE_RESOURCE_SERVER = "auth0_update_resource_server"
    DELETE_RESOURCE_SERVER = "auth0_delete_resource_server"

    LIST_ACTIONS = "auth0_list_actions"
    GET_ACTION = "auth0_get_action"
    CREATE_ACTION = "auth0_create_action"
    UPDATE_ACTION = "auth0_update_action"
    DELETE_ACTION = "auth0_delete_action"
    DEPLOY_ACTION = "auth0_deploy_action"

    LIST_LOGS = "auth0_list_logs"
    GET_LOG = "auth0_get_log"
    SEARCH_LOGS = "auth0_search_logs"

    LIST_FORMS = "auth0_list_forms"
    GET_FORM = "auth0_get_form"
    CREATE_FORM = "auth0_create_form"
    UPDATE_FORM = "auth0_update_form"
    DELETE_FORM = "auth0_delete_form"
    PUBLISH_FORM = "auth0_publish_form"


class ToolDefinition(BaseModel):
    """
    Complete definition of an MCP tool.

    Tools are declarative and immutable once registered. The input schema
    is advertised to the client; handlers do their own parameter checks.
    """
    model_config = ConfigDict(frozen=True)

    name: ToolName = Field(..., description="Tool identifier")
    family: ToolFamily = Field(..., description="Resource family the tool belongs to")
    description: str = Field(..., description="Clear description for LLM usage")

    input_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        description="JSON Schema advertised to the client"
    )


class Credential(BaseModel):
    """
    A bearer token paired with the tenant it is valid for.

    Operator supplied credentials (environment, command line) carry no
    expiry. Credentials are replaced wholesale, never mutated.
    """
    model_config = ConfigDict(frozen=True)

    token: str
    domain: str
    tenant_label: str = "default"
    source: str = Field(default="environment", description="Where the token came from")
    expires_at: Optional[datetime] = None

    def is_usable(self, now: Optional[datetime] = None) -> bool:
        """Return True while the token and domain are set and not expired."""
        if not self.token or not self.domain:
            return False
        if self.expires_at is None:
            return True
        now = now or datetime.now(timezone.utc)
        return now < self.expires_at


class HandlerRequest(BaseModel):
    """Token and caller parameters handed to a handler."""
    token: str
    parameters: dict[str, Any] = Field(default_factory=dict)


class HandlerConfig(BaseModel):
    """Per-call handler configuration."""
    domain: Optional[str] = None


class ContentItem(BaseModel):
    """A single content block of a tool result."""
    type: str = "text"
    text: str


class HandlerResponse(BaseModel):
    """
    Result of a tool invocation.

    Every handler path ends in one of these, success or error.
    """
    content: list[ContentItem] = Field(default_factory=list)
    is_error: bool = False

    @classmethod
    def success(cls, text: str) -> "HandlerResponse":
        return cls(content=[ContentItem(text=text)], is_error=False)

    @classmethod
    def error(cls, text: str) -> "HandlerResponse":
        return cls(content=[ContentItem(text=text)], is_error=True)

    @property
    def text(self) -> str:
        """Concatenated text of all content items."""
        return "\n".join(item.text for item in self.content)
