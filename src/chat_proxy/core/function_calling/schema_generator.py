"""
Function calling schema generation in the OpenAI-compatible tool format.

Converts each registered tool's parameter schema into the
``{"type": "function", "function": {...}}`` declaration advertised upstream.
"""

from typing import Any, Dict, List, TYPE_CHECKING

if TYPE_CHECKING:
    from ...tools.base import BaseTool
    from ...tools.registry import ToolRegistry


def generate_function_schema(tool: "BaseTool") -> Dict[str, Any]:
    """
    Generate an OpenAI-compatible function schema from a tool.

    The declaration has the form:
    {
        "type": "function",
        "function": {
            "name": "function_name",
            "description": "Function description",
            "parameters": {
                "type": "object",
                "properties": {...},
                "required": [...]
            }
        }
    }

    Args:
        tool: Tool instance to generate schema for

    Returns:
        OpenAI-compatible tool schema dictionary
    """
    parameters = clean_schema_for_openai(dict(tool.schema))

    # Ensure proper JSON Schema object format
    parameters.setdefault("type", "object")
    parameters.setdefault("properties", {})
    parameters.setdefault("required", [])

    return {
        "type": "function",
        "function": {
            "name": tool.name,
            "description": tool.description,
            "parameters": parameters
        }
    }


# JSON Schema keywords accepted by OpenAI-compatible providers; anything else
# (e.g. "$schema", "examples") is rejected by some of them.
SUPPORTED_SCHEMA_KEYS = frozenset({
    "type", "description", "properties", "required", "items", "enum",
    "minimum", "maximum", "minLength", "maxLength", "pattern", "format", "default",
})


def clean_schema_for_openai(schema: Dict[str, Any]) -> Dict[str, Any]:
    """
    Strip a parameter schema down to the supported keywords, recursively.

    Args:
        schema: JSON schema of a tool's parameters

    Returns:
        A copy holding only supported keywords
    """
    if not isinstance(schema, dict):
        return schema

    cleaned: Dict[str, Any] = {}
    for key in SUPPORTED_SCHEMA_KEYS.intersection(schema):
        value = schema[key]
        if key == "properties" and isinstance(value, dict):
            value = {name: clean_schema_for_openai(sub) for name, sub in value.items()}
        elif key == "items":
            value = clean_schema_for_openai(value)
        cleaned[key] = value
    return cleaned


def generate_all_function_schemas(tool_registry: "ToolRegistry") -> List[Dict[str, Any]]:
    """
    Generate OpenAI-compatible function schemas for all tools in registry.

    Args:
        tool_registry: Registry containing tools

    Returns:
        List of OpenAI-compatible tool schemas
    """
    return [generate_function_schema(tool) for tool in tool_registry.get_all_tools()]
