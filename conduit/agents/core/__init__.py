"""
Core abstractions for the tool-orchestration layer.

This module provides the interfaces, data models, enums and exceptions
shared by the connection manager, the tool registry and the action store.
"""

from .interfaces import (
    ToolService,
    ToolCatalogStore,
    StateManager,
)

from .models import (
    # Server and tool models
    ServerConfig,
    ToolDefinition,
    ToolMetadata,
    Tool,
    ToolCatalog,
    ServerRegistrationOutcome,

    # Action and document models
    ActionCreate,
    ActionUpdate,
    ActionRecord,
    DocumentRecord,

    # Job models
    JobCreate,
    JobRecord,

    # Boundary models
    ServiceResponse,
)

from .enums import (
    TransportType,
    ToolSource,
    ActionStatus,
    JobType,
    JobStatus,
    ErrorKind,
)

from .exceptions import (
    ConduitError,
    ServerError,
    ConfigurationError,
    UnsupportedTransportError,
    ServerConnectionError,
    DiscoveryError,
    InvocationError,
    NotFoundError,
    ActionNotFoundError,
    JobNotFoundError,
    PayloadValidationError,
    InvalidStateTransitionError,
    PersistenceError,
)

from .config import Settings, get_settings

__all__ = [
    # Interfaces
    "ToolService",
    "ToolCatalogStore",
    "StateManager",

    # Models
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
    "ServerError",
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

    # Settings
    "Settings",
    "get_settings",
]
