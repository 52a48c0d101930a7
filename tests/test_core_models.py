"""
Test cases for core models, enums and exceptions.
"""

import pytest
from pydantic import ValidationError

from conduit.agents.core.enums import ActionStatus, ErrorKind, ToolSource
from conduit.agents.core.exceptions import (
    ConduitError, DiscoveryError, JobNotFoundError, NotFoundError
)
from conduit.agents.core.models import (
    ServerConfig, Tool, ToolCatalog, ToolDefinition, ServerRegistrationOutcome, JobCreate
)


class TestServerConfig:
    """Test cases for ServerConfig."""

    @pytest.mark.parametrize("value, expected", [
        ("stdio", "stdio"),
        ("STDIO", "stdio"),
        ("network", "network"),
        ("http", "network"),
        ("streamable-http", "network"),
        ("websocket", "websocket"),
    ])
    def test_transport_normalization(self, value, expected):
        config = ServerConfig(id="s", name="S", transport_type=value)
        assert config.transport_type == expected

    def test_defaults(self):
        config = ServerConfig(id="s", name="S", command="python")
        assert config.transport_type == "stdio"
        assert config.enabled is True
        assert config.args == []
        assert config.target == "python"

    def test_target_for_network(self):
        config = ServerConfig(id="s", name="S", transport_type="network", address="http://x/mcp")
        assert config.target == "http://x/mcp"

    def test_frozen(self):
        config = ServerConfig(id="s", name="S", command="python")
        with pytest.raises(ValidationError):
            config.command = "node"

    def test_rejects_unknown_fields_and_bad_timeout(self):
        with pytest.raises(ValidationError):
            ServerConfig(id="s", name="S", port=1)
        with pytest.raises(ValidationError):
            ServerConfig(id="s", name="S", timeout_seconds=0)


class TestToolCatalog:
    """Test cases for ToolCatalog."""

    def test_duplicate_names_rejected(self):
        tool = Tool(name="calc/add", source=ToolSource.REMOTE)
        with pytest.raises(ValidationError):
            ToolCatalog(tools=(tool, Tool(name="calc/add", source=ToolSource.REMOTE)))

    def test_lookup_and_failures(self):
        catalog = ToolCatalog(
            tools=(Tool(name="final_answer", source=ToolSource.LOCAL),),
            outcomes=(
                ServerRegistrationOutcome(server_id="a", server_name="A", success=True, tool_count=2),
                ServerRegistrationOutcome(server_id="b", server_name="B", success=False,
                                          error="boom", error_kind=ErrorKind.DISCOVERY),
            )
        )

        assert len(catalog) == 1
        assert catalog.get("final_answer").source == ToolSource.LOCAL
        assert catalog.get("missing") is None
        assert [outcome.server_id for outcome in catalog.failed_servers()] == ["b"]

    def test_describe(self):
        catalog = ToolCatalog(tools=(
            Tool(name="final_answer", description="Finish", instruction="Use 'answer'", source=ToolSource.LOCAL),
            Tool(name="calc/add", description="Add", source=ToolSource.REMOTE),
        ))
        assert catalog.describe() == "final_answer: Finish\nUse 'answer'\n\ncalc/add: Add"


class TestModels:

    def test_tool_definition_by_name_or_alias(self):
        by_alias = ToolDefinition.model_validate({"name": "add", "inputSchema": {"type": "object"}})
        by_name = ToolDefinition(name="add", input_schema={"type": "object"})
        assert by_alias == by_name

    def test_job_resolved_schedule(self):
        job = JobCreate(name="j", description="", type="cron", schedule="* * * * *")
        assert job.resolved_schedule() == "* * * * *"
        assert JobCreate(name="j", description="", type="cron").resolved_schedule() is None

    def test_action_status_terminal(self):
        assert not ActionStatus.PENDING.is_terminal
        assert ActionStatus.COMPLETED.is_terminal
        assert ActionStatus.FAILED.is_terminal


class TestExceptions:

    def test_to_dict(self):
        error = DiscoveryError("listing failed", server_id="calc", error_code="E1", context={"attempt": 1})

        data = error.to_dict()

        assert str(error) == "[E1] listing failed"
        assert data["error_type"] == "DiscoveryError"
        assert data["kind"] == "discovery"
        assert data["context"] == {"attempt": 1}
        assert error.server_id == "calc"

    def test_hierarchy(self):
        error = JobNotFoundError("Job not found")
        assert isinstance(error, NotFoundError)
        assert isinstance(error, ConduitError)
        assert error.kind == ErrorKind.NOT_FOUND
        assert str(error) == "Job not found"
