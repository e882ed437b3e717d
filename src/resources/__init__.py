"""Management API resource families.

Each family contains:
- Tool definitions
- One handler per tool
- A register function wiring both into the server

Families are registered in catalog order: applications, resource
servers, actions, logs, forms.
"""

from typing import TYPE_CHECKING, Optional

import httpx

if TYPE_CHECKING:
    from mcp_server.registry import ToolRegistry
    from mcp_server.router import RequestDispatcher


def load_all_resources(
    registry: "ToolRegistry",
    dispatcher: "RequestDispatcher",
    timeout: float = 15.0,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> None:
    """
    Load and register every resource family.

    This is called when the server is built to register all tools
    and their handlers.
    """
    from resources.applications import register_applications
    from resources.resource_servers import register_resource_servers
    from resources.actions import register_actions
    from resources.logs import register_logs
    from resources.forms import register_forms

    register_applications(registry, dispatcher, timeout, transport)
    register_resource_servers(registry, dispatcher, timeout, transport)
    register_actions(registry, dispatcher, timeout, transport)
    register_logs(registry, dispatcher, timeout, transport)
    register_forms(registry, dispatcher, timeout, transport)


__all__ = ["load_all_resources"]
