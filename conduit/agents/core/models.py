"""
Core data models for the tool-orchestration layer.

This module defines the fundamental data structures shared by the connection
manager, the tool registry and the action store, providing type safety and
validation.
"""

from typing import Dict, Any, List, Optional, Tuple
from datetime import datetime, timezone
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
import uuid as uuid_lib

from .enums import (
    TransportType, ToolSource, ActionStatus, JobType, JobStatus, ErrorKind
)


_TRANSPORT_ALIASES = {
    "http": TransportType.NETWORK.value,
    "streamable-http": TransportType.NETWORK.value,
    "streamable_http": TransportType.NETWORK.value,
}


class ServerConfig(BaseModel):
    """Configuration of one remote capability server.

    ``transport_type`` is kept as a plain string so that kinds this process
    does not implement survive loading and are rejected by the connection
    manager with an explicit error.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        frozen=True,
        extra='forbid'
    )

    id: str = Field(..., description="Unique, stable server identifier", min_length=1)
    name: str = Field(..., description="Human-readable server name", min_length=1)
    transport_type: str = Field(
        default=TransportType.STDIO.value,
        description="Transport kind: stdio or network"
    )

    # network transport
    address: Optional[str] = Field(None, description="Endpoint URL for network transport")

    # stdio transport
    command: Optional[str] = Field(None, description="Executable for stdio transport")
    args: List[str] = Field(default_factory=list, description="Arguments for the command")
    env: Optional[Dict[str, str]] = Field(None, description="Environment for the child process")

    enabled: bool = Field(default=True, description="Whether the server is registered at all")
    description: Optional[str] = Field(None, description="Server description")
    timeout_seconds: Optional[float] = Field(
        None, description="Deadline for connect, list and call operations", gt=0
    )

    @field_validator("transport_type", mode="before")
    @classmethod
    def _normalize_transport(cls, value: Any) -> Any:
        if isinstance(value, TransportType):
            return value.value
        if isinstance(value, str):
            value = value.strip().lower()
            return _TRANSPORT_ALIASES.get(value, value)
        return value

    @property
    def target(self) -> str:
        """Address or command line, for log messages."""
        if self.address:
            return self.address
        return " ".join([self.command or ""] + list(self.args)).strip()


class ToolDefinition(BaseModel):
    """A tool as reported by a remote server's listing."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra='ignore'
    )

    name: str = Field(..., description="Remote tool name", min_length=1)
    description: Optional[str] = Field(None, description="Remote tool description")
    input_schema: Dict[str, Any] = Field(
        default_factory=dict,
        alias="inputSchema",
        description="JSON-schema-like parameter description"
    )

    @field_validator("input_schema", mode="before")
    @classmethod
    def _default_schema(cls, value: Any) -> Any:
        return {} if value is None else value


class ToolMetadata(BaseModel):
    """Persisted metadata of a locally executed tool."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra='forbid'
    )

    id: str = Field(default_factory=lambda: str(uuid_lib.uuid4()), description="Tool identifier")
    name: str = Field(..., description="Tool name", min_length=1, max_length=200)
    description: str = Field(default="", description="Tool description")
    instruction: str = Field(default="", description="Usage instruction for the planner")


class Tool(BaseModel):
    """One entry of the unified tool catalog."""

    model_config = ConfigDict(
        frozen=True,
        extra='forbid'
    )

    id: str = Field(default_factory=lambda: str(uuid_lib.uuid4()), description="Tool identifier")
    name: str = Field(..., description="Addressable tool name", min_length=1)
    description: str = Field(default="", description="Tool description")
    instruction: str = Field(default="", description="Usage instruction for the planner")
    source: ToolSource = Field(..., description="Local or remote execution")
    server_id: Optional[str] = Field(None, description="Server providing a remote tool")
    remote_name: Optional[str] = Field(None, description="Tool name on the remote server")


class ServerRegistrationOutcome(BaseModel):
    """Result of registering one server during registry initialization."""

    model_config = ConfigDict(frozen=True)

    server_id: str
    server_name: str
    success: bool
    tool_count: int = Field(default=0, ge=0)
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None


class ToolCatalog(BaseModel):
    """Immutable snapshot of every registered tool."""

    model_config = ConfigDict(frozen=True)

    tools: Tuple[Tool, ...] = Field(default_factory=tuple)
    outcomes: Tuple[ServerRegistrationOutcome, ...] = Field(default_factory=tuple)
    built_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def _check_unique_names(self) -> "ToolCatalog":
        names = [tool.name for tool in self.tools]
        if len(names) != len(set(names)):
            raise ValueError("Tool catalog contains duplicate tool names")
        return self

    @property
    def names(self) -> List[str]:
        return [tool.name for tool in self.tools]

    def get(self, name: str) -> Optional[Tool]:
        """Get a catalog entry by name."""
        for tool in self.tools:
            if tool.name == name:
                return tool
        return None

    def failed_servers(self) -> List[ServerRegistrationOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]

    def describe(self) -> str:
        """Render the catalog as text for a planning prompt."""
        blocks = []
        for tool in self.tools:
            block = f"{tool.name}: {tool.description}"
            if tool.instruction:
                block += f"\n{tool.instruction}"
            blocks.append(block)
        return "\n\n".join(blocks)

    def __len__(self) -> int:
        return len(self.tools)


# Action store models
class ActionCreate(BaseModel):
    """Validated input for a new action row."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra='forbid'
    )

    id: str = Field(default_factory=lambda: str(uuid_lib.uuid4()), min_length=1)
    task_id: str = Field(..., description="Parent task", min_length=1)
    tool_id: str = Field(..., description="Referenced tool", min_length=1)
    name: str = Field(..., description="Action name", min_length=1)
    type: str = Field(default="sync", description="Execution type")
    sequence: int = Field(..., description="Position within the task", ge=0)
    status: ActionStatus = Field(default=ActionStatus.PENDING)
    payload: Optional[Dict[str, Any]] = Field(None, description="Tool payload")


class ActionUpdate(BaseModel):
    """Validated partial update of an action row."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra='forbid'
    )

    name: Optional[str] = Field(None, min_length=1)
    sequence: Optional[int] = Field(None, ge=0)
    status: Optional[ActionStatus] = None
    payload: Optional[Dict[str, Any]] = None
    result: Optional[str] = None

    @field_validator("name", "sequence", "status", mode="before")
    @classmethod
    def _reject_null(cls, value: Any) -> Any:
        # Omit a field to leave it unchanged; these columns are never null
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class DocumentRecord(BaseModel):
    """A derived, indexable text artifact."""

    id: str
    text: str
    conversation_id: Optional[str] = None
    source_id: Optional[str] = None
    action_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    should_index: bool = False
    created_at: Optional[datetime] = None


class ActionRecord(BaseModel):
    """A persisted action together with its linked documents."""

    id: str
    task_id: str
    tool_id: str
    name: str
    type: str = "sync"
    sequence: int
    status: ActionStatus
    payload: Optional[Dict[str, Any]] = None
    result: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    documents: List[DocumentRecord] = Field(default_factory=list)

    def is_terminal(self) -> bool:
        return self.status.is_terminal


# Job models
class JobCreate(BaseModel):
    """Validated input for a scheduled job."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra='forbid'
    )

    name: str = Field(..., description="Job name", min_length=1)
    description: str = Field(..., description="What the job does")
    type: JobType = Field(..., description="Job type")
    schedule: Optional[str] = Field(None, description="Cron expression or schedule")
    due_date: Optional[datetime] = Field(None, description="One-off due date")
    metadata: Optional[Dict[str, Any]] = Field(None, description="Extra job metadata")

    def resolved_schedule(self) -> Optional[str]:
        """The due date wins over the schedule expression."""
        if self.due_date is not None:
            return self.due_date.isoformat()
        return self.schedule or None


class JobRecord(BaseModel):
    """A persisted scheduled job."""

    id: str
    name: str
    type: JobType
    schedule: str
    task_id: str
    status: JobStatus
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ServiceResponse(BaseModel):
    """Response handed to collaborators at the service boundary."""

    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    status_code: int = 200
