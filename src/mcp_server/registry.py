"""Tool Registry for the Auth0 MCP server.

Holds the static catalog of tools advertised over MCP. Tools are
registered by the resource families when the server is built and
never change afterwards.
"""

from typing import Optional

from shared.logging import get_logger
from shared.models import ToolDefinition, ToolFamily
from shared.schema import check_tool_schema

logger = get_logger(__name__)


class ToolRegistry:
    """
    Central registry for all MCP tools.

    Responsibilities:
    - Register tools from resource families
    - Reject duplicate names and malformed input schemas
    - Lookup tools by name
    - List tools in registration order
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        self._families: list[ToolFamily] = []

    def register(self, tool: ToolDefinition) -> None:
        """
        Register a tool in the registry.

        Args:
            tool: Tool definition to register

        Raises:
            ValueError: If the name is already registered or the schema is invalid
        """
        name = tool.name.value

        if name in self._tools:
            raise ValueError(f"Tool '{name}' is already registered")

        problems = check_tool_schema(tool.input_schema)
        if problems:
            raise ValueError(f"Tool '{name}' has an invalid input schema: {'; '.join(problems)}")

        self._tools[name] = tool
        if tool.family not in self._families:
            self._families.append(tool.family)

        logger.debug("Tool registered", tool=name, family=tool.family.value)

    def get(self, tool_name: str) -> Optional[ToolDefinition]:
        """
        Get a tool by name.

        Args:
            tool_name: Tool identifier, e.g. ``auth0_list_applications``

        Returns:
            ToolDefinition if found, None otherwise
        """
        return self._tools.get(tool_name)

    def list_tools(self, family: Optional[ToolFamily] = None) -> list[ToolDefinition]:
        """
        List registered tools in registration order.

        Args:
            family: Only return tools of this family

        Returns:
            List of tool definitions
        """
        tools = list(self._tools.values())
        if family is not None:
            tools = [t for t in tools if t.family == family]
        return tools

    def list_families(self) -> list[str]:
        """List the registered families in registration order."""
        return [family.value for family in self._families]

    def names(self) -> list[str]:
        return list(self._tools)

    def get_tool_count(self) -> dict[str, int]:
        """Get count of tools per family."""
        counts: dict[str, int] = {}
        for tool in self._tools.values():
            counts[tool.family.value] = counts.get(tool.family.value, 0) + 1
        return counts

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, tool_name: object) -> bool:
        return tool_name in self._tools
