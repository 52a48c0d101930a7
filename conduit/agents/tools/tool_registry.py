"""
Tool registry combining local tools and tools discovered on remote servers.

Each initialization builds a fresh immutable catalog and a fresh callable
map, then swaps both in at once so readers never see a half-built state.
"""

import asyncio
import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence

from ..core.enums import ToolSource, ErrorKind
from ..core.exceptions import ConduitError
from ..core.interfaces import ToolService, ToolCatalogStore, StateManager
from ..core.models import ServerConfig, Tool, ToolCatalog, ServerRegistrationOutcome
from .connection_manager import ConnectionManager
from .instruction_formatter import format_instruction
from .remote_tool import RemoteToolService, DEFAULT_INTERNAL_FIELDS

logger = logging.getLogger(__name__)


class _ServerRegistration(NamedTuple):
    outcome: ServerRegistrationOutcome
    tools: List[Tool]
    callables: Dict[str, ToolService]


def remote_tool_key(server_id: str, tool_name: str) -> str:
    """Catalog name of a remote tool; unique across servers."""
    return f"{server_id}/{tool_name}"


class ToolRegistry:
    """
    Registry producing one addressable map of local and remote tools.

    This class handles:
    - Binding persisted local-tool metadata to registered executors
    - Discovering tools on every enabled capability server
    - Synthesizing usage instructions from input schemas
    - Publishing the merged catalog to shared session state

    A failing server is logged and left out; it never prevents local tools
    or other servers from registering.
    """

    def __init__(
        self,
        connection_manager: ConnectionManager,
        server_configs: Sequence[ServerConfig],
        local_tools: Mapping[str, ToolService],
        tool_store: ToolCatalogStore,
        state_manager: Optional[StateManager] = None,
        internal_fields: Iterable[str] = DEFAULT_INTERNAL_FIELDS
    ):
        self._connection_manager = connection_manager
        self._server_configs = list(server_configs)
        self._local_tools = dict(local_tools)
        self._tool_store = tool_store
        self._state_manager = state_manager
        self._internal_fields = frozenset(internal_fields)

        self._catalog = ToolCatalog()
        self._callables: Mapping[str, ToolService] = MappingProxyType({})
        self._initialized = False
        self._init_lock = asyncio.Lock()
        self._initialization_count = 0

    @property
    def catalog(self) -> ToolCatalog:
        return self._catalog

    @property
    def callables(self) -> Mapping[str, ToolService]:
        """Read-only map of catalog name to executor."""
        return self._callables

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def initialization_count(self) -> int:
        return self._initialization_count

    def get_callable(self, name: str) -> Optional[ToolService]:
        return self._callables.get(name)

    async def initialize(self) -> ToolCatalog:
        """
        Register every tool once.

        Concurrent first calls wait for the same pass; once a pass has
        succeeded, later calls return its catalog without doing any work.
        A pass that raises leaves the registry uninitialized.
        """
        if self._initialized:
            return self._catalog

        async with self._init_lock:
            if self._initialized:
                return self._catalog
            catalog = await self._run_initialization()
            self._initialized = True
            return catalog

    async def reinitialize(self) -> ToolCatalog:
        """Rebuild the whole catalog, replacing the previous one."""
        async with self._init_lock:
            self._initialized = False
            catalog = await self._run_initialization()
            self._initialized = True
            return catalog

    async def _run_initialization(self) -> ToolCatalog:
        logger.info("Initializing tools...")
        self._initialization_count += 1

        tools: List[Tool] = []
        callables: Dict[str, ToolService] = {}

        # 1. Local tools from the persisted catalog
        await self._register_local_tools(tools, callables)

        # 2. Remote tools, one isolated registration per enabled server
        enabled = [config for config in self._server_configs if config.enabled]
        for config in self._server_configs:
            if not config.enabled:
                logger.info(f"MCP Server '{config.name}' (ID: {config.id}) is disabled, skipping")

        logger.info("Starting MCP tool discovery...")
        registrations = await asyncio.gather(
            *(self._register_server(config) for config in enabled)
        )

        outcomes = []
        for registration in registrations:
            for tool in registration.tools:
                if tool.name in callables:
                    logger.warning(f"Duplicate tool name '{tool.name}', keeping the first registration")
                    continue
                tools.append(tool)
                callables[tool.name] = registration.callables[tool.name]
            outcomes.append(registration.outcome)

        catalog = ToolCatalog(tools=tuple(tools), outcomes=tuple(outcomes))
        self._catalog = catalog
        self._callables = MappingProxyType(callables)

        # 3. Publish for the planning component
        if self._state_manager is not None:
            await self._state_manager.update_session(tools=catalog)

        failed = [outcome.server_id for outcome in catalog.failed_servers()]
        logger.info(
            f"All tools initialized. Total registered: {len(catalog)}, "
            f"tools: {catalog.names}, failed servers: {failed}"
        )
        return catalog

    async def _register_local_tools(self, tools: List[Tool], callables: Dict[str, ToolService]) -> None:
        try:
            local_metadata = await self._tool_store.get_available_tools()
        except Exception as e:
            logger.error(f"Failed to load native tools from database: {e}")
            return

        logger.info(f"Found {len(local_metadata)} native tools from database.")
        for metadata in local_metadata:
            executor = self._local_tools.get(metadata.name)
            if executor is None:
                logger.warning(f"Service for native tool '{metadata.name}' not found, skipping")
                continue
            if metadata.name in callables:
                logger.warning(f"Duplicate native tool '{metadata.name}', keeping the first entry")
                continue

            tools.append(Tool(
                id=metadata.id,
                name=metadata.name,
                description=metadata.description,
                instruction=metadata.instruction,
                source=ToolSource.LOCAL
            ))
            callables[metadata.name] = executor
            logger.info(f"Native tool '{metadata.name}' registered with its service.")

    async def _register_server(self, server_config: ServerConfig) -> _ServerRegistration:
        log_prefix = f"MCP Server '{server_config.name}' (ID: {server_config.id}):"
        logger.info(f"{log_prefix} Attempting to connect and list tools at {server_config.target}...")

        try:
            session = await self._connection_manager.get_client(server_config)
            definitions = await self._connection_manager.list_tools(session)
            logger.info(f"{log_prefix} Found {len(definitions)} tool(s).")

            tools: List[Tool] = []
            callables: Dict[str, ToolService] = {}
            for definition in definitions:
                key = remote_tool_key(server_config.id, definition.name)
                if key in callables:
                    logger.warning(f"{log_prefix} Server listed '{definition.name}' twice, skipping repeat")
                    continue

                tools.append(Tool(
                    name=key,
                    description=definition.description or f"MCP tool {definition.name} from {server_config.name}",
                    instruction=format_instruction(definition.name, definition.input_schema),
                    source=ToolSource.REMOTE,
                    server_id=server_config.id,
                    remote_name=definition.name
                ))
                callables[key] = RemoteToolService(
                    self._connection_manager,
                    server_config,
                    definition.name,
                    internal_fields=self._internal_fields
                )
                logger.debug(f"{log_prefix} Registered tool '{definition.name}' as '{key}'.")
        except Exception as e:
            logger.error(f"{log_prefix} Failed to register tools: {e}")
            kind = e.kind if isinstance(e, ConduitError) else ErrorKind.INTERNAL
            outcome = ServerRegistrationOutcome(
                server_id=server_config.id,
                server_name=server_config.name,
                success=False,
                error=str(e),
                error_kind=kind
            )
            return _ServerRegistration(outcome, [], {})

        outcome = ServerRegistrationOutcome(
            server_id=server_config.id,
            server_name=server_config.name,
            success=True,
            tool_count=len(tools)
        )
        return _ServerRegistration(outcome, tools, callables)
