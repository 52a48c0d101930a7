"""
Runtime wiring for the tool-orchestration layer.

``ToolRuntime`` builds every collaborator once and hands them out
explicitly; there are no process-wide instances.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from .actions.action_service import ActionService
from .core.config import Settings, get_settings
from .core.exceptions import ConduitError, NotFoundError
from .core.interfaces import StateManager, ToolService
from .core.models import ActionRecord, ServerConfig, ToolCatalog
from .jobs.job_service import JobService
from .memory.state_manager import InMemoryStateManager
from .persistence.database import close_engine, create_engine, create_session_factory, init_models
from .persistence.tool_store import ToolStore
from .tools.connection_manager import ClientFactory, ConnectionManager
from .tools.local_tools import default_local_tools
from .tools.tool_registry import ToolRegistry
from .utils.config_loader import load_server_configs
from .utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


class ToolRuntime:
    """
    Explicit object graph of the tool-orchestration layer.

    This class handles:
    - Constructing the connection manager, registry and services once
    - Startup: schema creation and registry initialization
    - Running a pending action through its tool and storing the outcome
    - Shutdown: disconnecting every server and disposing the engine

    Usage:
        async with ToolRuntime.create(settings) as runtime:
            action = await runtime.actions.create_action({...})
            action = await runtime.run_action(action.id, "calc/add", {"a": 1, "b": 2})
    """

    def __init__(
        self,
        settings: Settings,
        engine: AsyncEngine,
        session_factory: async_sessionmaker[AsyncSession],
        connection_manager: ConnectionManager,
        registry: ToolRegistry,
        tool_store: ToolStore,
        actions: ActionService,
        jobs: JobService,
        state_manager: StateManager
    ):
        self.settings = settings
        self.engine = engine
        self.session_factory = session_factory
        self.connection_manager = connection_manager
        self.registry = registry
        self.tool_store = tool_store
        self.actions = actions
        self.jobs = jobs
        self.state_manager = state_manager
        self._started = False
        self._closed = False

    @classmethod
    def create(
        cls,
        settings: Optional[Settings] = None,
        server_configs: Optional[Sequence[ServerConfig]] = None,
        local_tools: Optional[Mapping[str, ToolService]] = None,
        client_factory: Optional[ClientFactory] = None,
        state_manager: Optional[StateManager] = None
    ) -> "ToolRuntime":
        """
        Build a runtime from settings.

        Args:
            settings: Settings to use; loaded from the environment when omitted
            server_configs: Capability servers; read from
                ``settings.servers_config_path`` when omitted
            local_tools: Executors for local tools, by tool name; the
                built-in executors are used when omitted
            client_factory: Protocol client factory for the connection manager
            state_manager: Shared state the registry publishes its catalog to
        """
        settings = settings or get_settings()
        configure_logging(settings.log_level)

        if server_configs is None:
            server_configs = (
                load_server_configs(settings.servers_config_path)
                if settings.servers_config_path else []
            )

        engine = create_engine(settings.database_url, echo=settings.database_echo)
        session_factory = create_session_factory(engine)
        tool_store = ToolStore(session_factory)
        state_manager = state_manager or InMemoryStateManager()

        connection_manager = ConnectionManager(
            client_factory=client_factory,
            connect_timeout=settings.connect_timeout_seconds,
            call_timeout=settings.call_timeout_seconds,
        )
        registry = ToolRegistry(
            connection_manager,
            server_configs,
            local_tools if local_tools is not None else default_local_tools(),
            tool_store,
            state_manager=state_manager,
            internal_fields=settings.internal_payload_fields,
        )

        return cls(
            settings=settings,
            engine=engine,
            session_factory=session_factory,
            connection_manager=connection_manager,
            registry=registry,
            tool_store=tool_store,
            actions=ActionService(session_factory),
            jobs=JobService(session_factory),
            state_manager=state_manager,
        )

    @property
    def catalog(self) -> ToolCatalog:
        return self.registry.catalog

    async def startup(self) -> ToolCatalog:
        """Create the schema and register every tool."""
        if not self._started:
            await init_models(self.engine)
            self._started = True
        return await self.registry.initialize()

    async def run_action(
        self,
        action_id: str,
        tool_name: str,
        payload: Optional[Dict[str, Any]] = None
    ) -> ActionRecord:
        """
        Execute a pending action with a catalog tool and store the outcome.

        A successful result completes the action. A failing tool fails the
        action with the error message, then the error is raised to the caller.

        Raises:
            NotFoundError: If the tool is not in the catalog
            ActionNotFoundError: If the action does not exist
        """
        executor = self.registry.get_callable(tool_name)
        if executor is None:
            raise NotFoundError(f"Tool not found: {tool_name}", context={"tool_name": tool_name})

        action = await self.actions.get_action(action_id)
        arguments = payload if payload is not None else dict(action.payload or {})
        tool = self.registry.catalog.get(tool_name)
        operation = tool.remote_name if tool is not None and tool.remote_name else action.name

        logger.info(f"Running action {action_id} with tool '{tool_name}'")
        try:
            result = await executor.execute(operation, arguments)
        except ConduitError as e:
            logger.error(f"Tool '{tool_name}' failed for action {action_id}: {e}")
            await self._record_failure(action_id, e.message)
            raise
        except Exception as e:
            logger.error(f"Tool '{tool_name}' failed for action {action_id}: {e}", exc_info=True)
            await self._record_failure(action_id, str(e))
            raise

        return await self.actions.update_action_with_result(action_id, result)

    async def _record_failure(self, action_id: str, message: str) -> None:
        # The tool error is what the caller sees; a failed write is only logged
        try:
            await self.actions.fail_action(action_id, message)
        except ConduitError as e:
            logger.error(f"Could not mark action {action_id} failed: {e}")

    async def shutdown(self) -> None:
        """Disconnect every server and dispose the engine. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        await self.connection_manager.disconnect_all()
        await close_engine(self.engine)
        logger.info("Tool runtime shut down")

    async def __aenter__(self) -> "ToolRuntime":
        await self.startup()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.shutdown()
