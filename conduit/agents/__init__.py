"""
Tool-orchestration package.

This package connects to remote capability servers, merges their tools with
locally executed tools into one catalog, and stores tool results as
completed actions with derived documents.
"""

# Runtime
from .runtime import ToolRuntime

# Connections and registry
from .tools.connection_manager import ConnectionManager, ServerSession
from .tools.tool_registry import ToolRegistry
from .tools.local_tools import FinalAnswerTool, FunctionTool, default_local_tools
from .tools.remote_tool import RemoteToolService

# Actions and jobs
from .actions.action_service import ActionService
from .actions.result_normalizer import canonical_text, parse_result
from .jobs.job_service import JobService

# Shared state and persistence
from .memory.state_manager import InMemoryStateManager
from .persistence.tool_store import ToolStore

# Configuration
from .core.config import Settings, get_settings
from .utils.config_loader import load_server_configs

# Core models and enums
from .core.models import (
    ServerConfig, ToolDefinition, ToolMetadata, Tool, ToolCatalog,
    ServerRegistrationOutcome, ActionCreate, ActionUpdate, ActionRecord,
    DocumentRecord, JobCreate, JobRecord, ServiceResponse
)

from .core.enums import (
    TransportType, ToolSource, ActionStatus, JobType, JobStatus, ErrorKind
)

# Exceptions
from .core.exceptions import (
    ConduitError, ConfigurationError, UnsupportedTransportError,
    ServerConnectionError, DiscoveryError, InvocationError, NotFoundError,
    ActionNotFoundError, JobNotFoundError, PayloadValidationError,
    InvalidStateTransitionError, PersistenceError
)

__version__ = "0.1.0"

__all__ = [
    # Runtime
    "ToolRuntime",

    # Connections and registry
    "ConnectionManager",
    "ServerSession",
    "ToolRegistry",
    "FinalAnswerTool",
    "FunctionTool",
    "default_local_tools",
    "RemoteToolService",

    # Actions and jobs
    "ActionService",
    "canonical_text",
    "parse_result",
    "JobService",

    # Shared state and persistence
    "InMemoryStateManager",
    "ToolStore",

    # Configuration
    "Settings",
    "get_settings",
    "load_server_configs",

    # Core models
    "ServerConfig",
    "ToolDefinition",
    "ToolMetadata",
    "Tool",
    "ToolCatalog",
    "ServerRegistrationOutcome",
    "ActionCreate",
    "ActionUpdate",
    "ActionRecord",
    "DocumentRecord",
    "JobCreate",
    "JobRecord",
    "ServiceResponse",

    # Enums
    "TransportType",
    "ToolSource",
    "ActionStatus",
    "JobType",
    "JobStatus",
    "ErrorKind",

    # Exceptions
    "ConduitError",
    "ConfigurationError",
    "UnsupportedTransportError",
    "ServerConnectionError",
    "DiscoveryError",
    "InvocationError",
    "NotFoundError",
    "ActionNotFoundError",
    "JobNotFoundError",
    "PayloadValidationError",
    "InvalidStateTransitionError",
    "PersistenceError",
]
