"""
Enumerations for the tool-orchestration layer.

This module defines the enums shared by the connection manager, the tool
registry and the action store, providing type safety and clear definitions
for transports, statuses and error kinds.
"""

from enum import Enum


class TransportType(str, Enum):
    """Transport used to reach a capability server.

    - STDIO: child process speaking the protocol over its stdin/stdout
    - NETWORK: remote endpoint reached over streamable HTTP
    """
    STDIO = "stdio"
    NETWORK = "network"

    def __str__(self) -> str:
        return self.value


class ToolSource(str, Enum):
    """Where a catalog entry is executed."""
    LOCAL = "local"
    REMOTE = "remote"

    def __str__(self) -> str:
        return self.value


class ActionStatus(str, Enum):
    """Action status enumeration.

    Status is monotonic: PENDING moves to exactly one of the terminal
    states and never leaves it.
    """
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value

    @property
    def is_terminal(self) -> bool:
        return self is not ActionStatus.PENDING


class JobType(str, Enum):
    """Scheduled job types."""
    CRON = "cron"
    SCHEDULED = "scheduled"
    RECURRING = "recurring"

    def __str__(self) -> str:
        return self.value


class JobStatus(str, Enum):
    """Scheduled job lifecycle."""
    ACTIVE = "active"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value


class ErrorKind(str, Enum):
    """Error taxonomy used by exceptions and boundary responses."""
    CONFIGURATION = "configuration"
    UNSUPPORTED_TRANSPORT = "unsupported_transport"
    CONNECTION = "connection"
    DISCOVERY = "discovery"
    INVOCATION = "invocation"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    INVALID_STATE = "invalid_state"
    PERSISTENCE = "persistence"
    INTERNAL = "internal"

    def __str__(self) -> str:
        return self.value
