"""JSON Schema utilities for tool input schemas."""

from typing import Any

from jsonschema import Draft7Validator, SchemaError


def check_tool_schema(schema: dict[str, Any]) -> list[str]:
    """
    Check that a tool input schema is a well-formed object schema.

    Args:
        schema: JSON Schema advertised for a tool

    Returns:
        List of problems, empty when the schema is usable
    """
    try:
        Draft7Validator.check_schema(schema)
    except SchemaError as e:
        return [e.message]

    problems = []
    if schema.get("type") != "object":
        problems.append("input schema must describe an object")

    properties = schema.get("properties", {})
    for name in schema.get("required", []):
        if name not in properties:
            problems.append(f"required parameter '{name}' has no property definition")

    return problems


def object_schema(
    properties: dict[str, dict[str, Any]],
    required: list[str] | None = None
) -> dict[str, Any]:
    """
    Build an object schema from property definitions.

    Args:
        properties: Mapping of parameter name to its JSON Schema
        required: List of required parameter names

    Returns:
        JSON Schema dictionary
    """
    schema: dict[str, Any] = {
        "type": "object",
        "properties": properties,
    }
    if required:
        schema["required"] = required
    return schema
