"""
Conduit

Tool orchestration for LLM agents: connects to MCP capability servers,
merges their tools with local tools into one catalog, and turns tool
results into persisted actions and searchable documents.

Example usage:
    from conduit.agents import ToolRuntime, Settings, ServerConfig

    servers = [ServerConfig(id="calc", name="Calculator", command="python", args=["calc.py"])]

    async with ToolRuntime.create(Settings(), server_configs=servers) as runtime:
        print(runtime.catalog.describe())
"""

__version__ = "0.1.0"

from .agents import (
    ToolRuntime,
    ConnectionManager,
    ToolRegistry,
    ActionService,
    JobService,
    Settings,
    ServerConfig,
    ToolCatalog,
    ActionRecord,
    ConduitError,
)

__all__ = [
    "ToolRuntime",
    "ConnectionManager",
    "ToolRegistry",
    "ActionService",
    "JobService",
    "Settings",
    "ServerConfig",
    "ToolCatalog",
    "ActionRecord",
    "ConduitError",
]
