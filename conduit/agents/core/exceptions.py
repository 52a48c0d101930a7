"""
Exception classes for the tool-orchestration layer.

This module defines the hierarchy of exceptions raised by the connection
manager, the tool registry and the action store. Every exception carries an
``ErrorKind`` so that collaborators can map failures without inspecting
class names.
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone

from .enums import ErrorKind


class ConduitError(Exception):
    """Base exception for all tool-orchestration errors.

    It provides common functionality for error tracking and debugging.
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc)

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "kind": self.kind.value,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
            "timestamp": self.timestamp.isoformat()
        }


# Capability server exceptions
class ServerError(ConduitError):
    """Base exception for errors tied to one capability server."""

    def __init__(
        self,
        message: str,
        server_id: Optional[str] = None,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, error_code, context)
        self.server_id = server_id


class ConfigurationError(ServerError):
    """Raised when a server configuration lacks what its transport needs."""
    kind = ErrorKind.CONFIGURATION


class UnsupportedTransportError(ServerError):
    """Raised when a transport kind is not implemented."""
    kind = ErrorKind.UNSUPPORTED_TRANSPORT


class ServerConnectionError(ServerError):
    """Raised when the handshake or process spawn fails."""
    kind = ErrorKind.CONNECTION


class DiscoveryError(ServerError):
    """Raised when a tool listing fails or has an unrecognized shape."""
    kind = ErrorKind.DISCOVERY


class InvocationError(ServerError):
    """Raised when a remote tool call fails."""
    kind = ErrorKind.INVOCATION


# Record exceptions
class NotFoundError(ConduitError):
    """Base exception for unknown record ids."""
    kind = ErrorKind.NOT_FOUND


class ActionNotFoundError(NotFoundError):
    """Raised when an action id does not exist."""
    pass


class JobNotFoundError(NotFoundError):
    """Raised when a job id does not exist."""
    pass


class PayloadValidationError(ConduitError):
    """Raised when an action or job payload fails schema validation."""
    kind = ErrorKind.VALIDATION


class InvalidStateTransitionError(ConduitError):
    """Raised when a terminal action is asked to change status again."""
    kind = ErrorKind.INVALID_STATE


class PersistenceError(ConduitError):
    """Raised when a transaction fails and is rolled back."""
    kind = ErrorKind.PERSISTENCE
