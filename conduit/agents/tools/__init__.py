"""
Connection management, tool discovery and the unified tool registry.
"""

from .connection_manager import (
    ConnectionManager,
    ServerSession,
    ClientFactory,
    TransportBuilder,
    parse_tool_listing,
    extract_result_content,
)
from .instruction_formatter import format_instruction, resolve_parameters, NO_PARAMETERS_NOTE
from .local_tools import FinalAnswerTool, FunctionTool, default_local_tools, FINAL_ANSWER_FALLBACK
from .remote_tool import RemoteToolService, strip_internal_fields, DEFAULT_INTERNAL_FIELDS
from .tool_registry import ToolRegistry, remote_tool_key

__all__ = [
    # Connections
    "ConnectionManager",
    "ServerSession",
    "ClientFactory",
    "TransportBuilder",
    "parse_tool_listing",
    "extract_result_content",

    # Instructions
    "format_instruction",
    "resolve_parameters",
    "NO_PARAMETERS_NOTE",

    # Executors
    "FinalAnswerTool",
    "FunctionTool",
    "default_local_tools",
    "FINAL_ANSWER_FALLBACK",
    "RemoteToolService",
    "strip_internal_fields",
    "DEFAULT_INTERNAL_FIELDS",

    # Registry
    "ToolRegistry",
    "remote_tool_key",
]
