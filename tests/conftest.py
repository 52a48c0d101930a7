"""
Pytest configuration and shared fixtures.

This module provides fake MCP clients, server configurations and an
in-memory database for all tests.
"""

import asyncio
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from conduit.agents.core.models import ServerConfig, ToolMetadata
from conduit.agents.tools.connection_manager import ConnectionManager
from conduit.agents.persistence.database import (
    create_engine, create_session_factory, init_models, close_engine
)
from conduit.agents.persistence.tool_store import ToolStore
from conduit.agents.actions.action_service import ActionService
from conduit.agents.jobs.job_service import JobService
from conduit.agents.memory.state_manager import InMemoryStateManager


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def make_tool(name: str, description: Optional[str] = None, properties: Optional[Dict[str, Any]] = None,
              required: Optional[List[str]] = None) -> Dict[str, Any]:
    """Build a tool entry the way a server lists it."""
    return {
        "name": name,
        "description": description,
        "inputSchema": {
            "type": "object",
            "properties": properties or {},
            "required": required or [],
        },
    }


class FakeClient:
    """Stands in for a fastmcp Client."""

    def __init__(
        self,
        tools: Optional[List[Dict[str, Any]]] = None,
        listing: Any = None,
        call_result: Any = None,
        connect_delay: float = 0.0,
        connect_error: Optional[Exception] = None,
        list_error: Optional[Exception] = None,
        call_error: Optional[Exception] = None
    ):
        self.tools = tools or []
        self.listing = listing
        self.call_result = call_result
        self.connect_delay = connect_delay
        self.connect_error = connect_error
        self.list_error = list_error
        self.call_error = call_error

        self.enter_count = 0
        self.exit_count = 0
        self.list_count = 0
        self.calls: List[tuple] = []

    async def __aenter__(self):
        self.enter_count += 1
        if self.connect_delay:
            await asyncio.sleep(self.connect_delay)
        if self.connect_error is not None:
            raise self.connect_error
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.exit_count += 1

    async def list_tools(self):
        self.list_count += 1
        if self.list_error is not None:
            raise self.list_error
        if self.listing is not None:
            return self.listing
        return list(self.tools)

    async def call_tool_mcp(self, name: str, arguments: Dict[str, Any]):
        self.calls.append((name, arguments))
        if self.call_error is not None:
            raise self.call_error
        if self.call_result is not None:
            return self.call_result
        return SimpleNamespace(content=[{"type": "text", "text": f"{name} done"}], isError=False)


class FakeClientFactory:
    """Client factory handing out one FakeClient per server id."""

    def __init__(self, clients: Optional[Dict[str, FakeClient]] = None):
        self.clients = dict(clients or {})
        self.created: List[tuple] = []

    def __call__(self, server_config: ServerConfig, transport: Any) -> FakeClient:
        client = self.clients.setdefault(server_config.id, FakeClient())
        self.created.append((server_config.id, transport))
        return client


@pytest.fixture
def stdio_config() -> ServerConfig:
    """Create a stdio server configuration."""
    return ServerConfig(
        id="calc",
        name="Calculator",
        transport_type="stdio",
        command="python",
        args=["calc_server.py"],
        description="Arithmetic tools"
    )


@pytest.fixture
def network_config() -> ServerConfig:
    """Create a network server configuration."""
    return ServerConfig(
        id="search",
        name="Search",
        transport_type="network",
        address="http://localhost:8000/mcp"
    )


@pytest.fixture
def client_factory() -> FakeClientFactory:
    return FakeClientFactory()


@pytest.fixture
async def connection_manager(client_factory):
    """Create a connection manager backed by fake clients."""
    manager = ConnectionManager(client_factory=client_factory, connect_timeout=1.0, call_timeout=1.0)
    yield manager
    await manager.disconnect_all()


@pytest.fixture
def state_manager() -> InMemoryStateManager:
    return InMemoryStateManager()


@pytest.fixture
async def db_engine():
    """Create an in-memory database with every table."""
    engine = create_engine(TEST_DATABASE_URL)
    await init_models(engine)
    yield engine
    await close_engine(engine)


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
def tool_store(session_factory) -> ToolStore:
    return ToolStore(session_factory)


@pytest.fixture
async def seeded_tool_store(tool_store) -> ToolStore:
    """Tool store holding the final_answer tool."""
    await tool_store.upsert_tool(ToolMetadata(
        name="final_answer",
        description="Use this tool to write the final answer",
        instruction="Provide the answer in the 'answer' field"
    ))
    return tool_store


@pytest.fixture
def action_service(session_factory) -> ActionService:
    return ActionService(session_factory)


@pytest.fixture
def job_service(session_factory) -> JobService:
    return JobService(session_factory)


@pytest.fixture
def action_data() -> Dict[str, Any]:
    """Input for a new pending action."""
    return {
        "task_id": "task-1",
        "tool_id": "tool-1",
        "name": "add",
        "sequence": 0,
        "payload": {"a": 1, "b": 2},
    }
