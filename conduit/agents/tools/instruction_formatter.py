"""
Usage instructions for remote tools.

Turns a tool's JSON-schema-like input description into plain text a planner
can follow when building a payload.
"""

from typing import Any, Dict, List, Optional, Tuple

NO_PARAMETERS_NOTE = (
    "This tool may not have explicitly defined parameters in its schema or uses a "
    "generic payload structure. Refer to its description or the tool may not require "
    "specific input fields."
)


def resolve_parameters(schema: Any) -> Tuple[Dict[str, Any], List[str]]:
    """Return the ``properties`` and ``required`` lists to describe.

    Some servers wrap their real schema in a single ``inputSchema`` property;
    that one level is unwrapped.
    """
    if not isinstance(schema, dict):
        return {}, []

    properties = schema.get("properties")
    required = schema.get("required")

    if isinstance(properties, dict) and len(properties) == 1:
        nested = properties.get("inputSchema")
        if isinstance(nested, dict) and nested.get("properties") is not None:
            properties = nested.get("properties")
            required = nested.get("required") or []

    if not isinstance(properties, dict):
        properties = {}
    if not isinstance(required, (list, tuple)):
        required = []
    return properties, list(required)


def format_parameter(name: str, details: Any, required: List[str]) -> str:
    details = details if isinstance(details, dict) else {}
    kind = details.get("type") or "any"
    if isinstance(kind, list):
        kind = ",".join(str(item) for item in kind)
    line = f"- \"{name}\": (type: {kind}"
    if details.get("description"):
        line += f", description: {details['description']}"
    line += ")"
    if name in required:
        line += " [required]"
    return line


def format_instruction(tool_name: str, schema: Optional[Dict[str, Any]]) -> str:
    """
    Build the usage instruction for a tool.

    Args:
        tool_name: Tool name as the server reports it
        schema: The tool's input schema

    Returns:
        One line per parameter with its type, description and a
        ``[required]`` marker, or a fallback note when no parameters are
        defined.
    """
    instruction = (
        f"To use the '{tool_name}' tool, provide the following parameters "
        f"in the payload as a JSON object:\n"
    )
    properties, required = resolve_parameters(schema)

    if not properties:
        return instruction + NO_PARAMETERS_NOTE

    for name, details in properties.items():
        instruction += format_parameter(name, details, required) + "\n"
    return instruction
