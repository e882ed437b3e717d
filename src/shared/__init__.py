"""Shared models, configuration and logging for the Auth0 MCP server."""

from shared.models import (
    Credential,
    HandlerConfig,
    HandlerRequest,
    HandlerResponse,
    ToolDefinition,
    ToolFamily,
    ToolName,
)
from shared.config import Auth0Settings, Settings, get_settings
from shared.logging import get_logger, setup_logging

__all__ = [
    "Credential",
    "HandlerConfig",
    "HandlerRequest",
    "HandlerResponse",
    "ToolDefinition",
    "ToolFamily",
    "ToolName",
    "Auth0Settings",
    "Settings",
    "get_settings",
    "get_logger",
    "setup_logging",
]
