"""
Connection manager for remote capability servers.

This module owns the session store: one live FastMCP client per server id,
plus the in-flight connect attempt while a client is being established.
Concurrent requests for the same server share a single connect attempt.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional
from datetime import datetime, timezone

from fastmcp import Client
from fastmcp.client.transports import ClientTransport, StdioTransport, StreamableHttpTransport
from pydantic import BaseModel, ValidationError

from ..core.enums import TransportType
from ..core.models import ServerConfig, ToolDefinition
from ..core.exceptions import (
    ConfigurationError, UnsupportedTransportError,
    ServerConnectionError, DiscoveryError, InvocationError
)

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ServerConfig, ClientTransport], Any]
TransportBuilder = Callable[[ServerConfig], ClientTransport]


def _default_client_factory(server_config: ServerConfig, transport: ClientTransport) -> Client:
    return Client(transport)


def parse_tool_listing(raw: Any) -> List[ToolDefinition]:
    """Normalize a tool listing to an ordered list of definitions.

    Accepted shapes are a bare sequence, a mapping with a ``tools`` sequence
    and an object exposing a ``tools`` sequence (``ListToolsResult``).

    Raises:
        DiscoveryError: If the listing has any other shape or an entry is malformed
    """
    if isinstance(raw, (list, tuple)):
        items = raw
    elif isinstance(raw, Mapping):
        items = raw.get("tools")
        if not isinstance(items, (list, tuple)):
            raise DiscoveryError("Tool listing mapping has no 'tools' sequence")
    elif isinstance(getattr(raw, "tools", None), (list, tuple)):
        items = raw.tools
    else:
        raise DiscoveryError(f"Unrecognized tool listing of type {type(raw).__name__}")

    definitions = []
    for item in items:
        if isinstance(item, ToolDefinition):
            definitions.append(item)
            continue
        if isinstance(item, BaseModel):
            item = item.model_dump()
        try:
            definitions.append(ToolDefinition.model_validate(item))
        except ValidationError as e:
            raise DiscoveryError(f"Malformed tool definition in listing: {e}") from e
    return definitions


def extract_result_content(result: Any) -> Any:
    """Return the ``content`` of a call result, or the result itself."""
    if isinstance(result, Mapping):
        return result["content"] if "content" in result else result
    content = getattr(result, "content", None)
    if content is not None:
        return content
    return result


class ServerSession:
    """Live connection to one capability server."""

    def __init__(self, server_config: ServerConfig, client: Any):
        self.server_id = server_config.id
        self.server_name = server_config.name
        self.timeout_seconds = server_config.timeout_seconds
        self.client = client
        self.connected_at: Optional[datetime] = None

    async def open(self) -> None:
        await self.client.__aenter__()
        self.connected_at = datetime.now(timezone.utc)

    async def close(self) -> None:
        await self.client.__aexit__(None, None, None)

    def __repr__(self) -> str:
        return f"ServerSession(server_id={self.server_id!r})"


class ConnectionManager:
    """
    Session store and proxy for remote capability servers.

    This class handles:
    - Transport selection and validation per server configuration
    - Single-flight connection establishment per server id
    - Tool discovery with listing-shape normalization
    - Tool invocation forwarding
    - Best-effort disconnection

    Usage:
        manager = ConnectionManager()
        session = await manager.get_client(server_config)
        tools = await manager.list_tools(session)
        content = await manager.call_tool(session, "scrape", {"url": "https://example.com"})
        await manager.disconnect_all()
    """

    def __init__(
        self,
        client_factory: Optional[ClientFactory] = None,
        connect_timeout: float = 30.0,
        call_timeout: float = 60.0
    ):
        """
        Initialize the connection manager.

        Args:
            client_factory: Builds a protocol client for a server and transport
            connect_timeout: Default deadline for establishing a session
            call_timeout: Default deadline for listing and calling tools
        """
        self._client_factory = client_factory or _default_client_factory
        self._connect_timeout = connect_timeout
        self._call_timeout = call_timeout

        # Session store
        self._sessions: Dict[str, ServerSession] = {}
        self._pending: Dict[str, "asyncio.Task[ServerSession]"] = {}
        self._lock = asyncio.Lock()

        self._transport_builders: Dict[str, TransportBuilder] = {
            TransportType.STDIO.value: self._build_stdio_transport,
            TransportType.NETWORK.value: self._build_network_transport,
        }

        # Metrics
        self._connect_attempts = 0
        self._total_calls = 0
        self._total_errors = 0

    def register_transport(self, transport_type: str, builder: TransportBuilder) -> None:
        """Register a builder for an additional transport kind."""
        self._transport_builders[transport_type.strip().lower()] = builder
        logger.info(f"Registered transport builder: {transport_type}")

    async def get_client(self, server_config: ServerConfig) -> ServerSession:
        """
        Return the live session for a server, connecting if needed.

        Concurrent callers for the same server id share one connect attempt
        and all observe its outcome.

        Raises:
            ConfigurationError: If the transport's required fields are missing
            UnsupportedTransportError: If the transport kind is not implemented
            ServerConnectionError: If the handshake or process spawn fails
        """
        server_id = server_config.id
        async with self._lock:
            session = self._sessions.get(server_id)
            if session is not None:
                return session

            pending = self._pending.get(server_id)
            if pending is None:
                pending = asyncio.create_task(
                    self._connect_and_store(server_config),
                    name=f"mcp-connect-{server_id}"
                )
                self._pending[server_id] = pending

        # A cancelled waiter must not cancel the attempt other waiters share
        return await asyncio.shield(pending)

    async def _connect_and_store(self, server_config: ServerConfig) -> ServerSession:
        server_id = server_config.id
        attempt = asyncio.current_task()
        try:
            session = await self._establish_connection(server_config)
        except BaseException:
            async with self._lock:
                if self._pending.get(server_id) is attempt:
                    del self._pending[server_id]
            raise

        async with self._lock:
            if self._pending.get(server_id) is attempt:
                del self._pending[server_id]
                self._sessions[server_id] = session
                return session

        # disconnect() ran while this attempt was in flight
        await self._close_quietly(session)
        raise ServerConnectionError(
            f"Connection to MCP server {server_id} was discarded by a disconnect",
            server_id=server_id
        )

    async def _establish_connection(self, server_config: ServerConfig) -> ServerSession:
        server_id = server_config.id
        transport = self._build_transport(server_config)

        logger.info(
            f"Establishing connection for {server_id} using {server_config.transport_type} "
            f"({server_config.target})"
        )
        self._connect_attempts += 1
        session = ServerSession(server_config, self._client_factory(server_config, transport))
        timeout = server_config.timeout_seconds or self._connect_timeout

        try:
            await asyncio.wait_for(session.open(), timeout=timeout)
        except asyncio.TimeoutError as e:
            await self._close_quietly(session)
            raise ServerConnectionError(
                f"Timed out after {timeout}s connecting to MCP server {server_id}",
                server_id=server_id
            ) from e
        except Exception as e:
            logger.error(f"Failed to connect/initialize MCP client for {server_id}: {e}")
            await self._close_quietly(session)
            raise ServerConnectionError(
                f"Failed to connect to MCP server {server_id}: {e}",
                server_id=server_id
            ) from e

        logger.info(f"Client connected for {server_id}")
        return session

    def _build_transport(self, server_config: ServerConfig) -> ClientTransport:
        builder = self._transport_builders.get(server_config.transport_type)
        if builder is None:
            raise UnsupportedTransportError(
                f"Unsupported MCP transport type: {server_config.transport_type} "
                f"for server {server_config.id}",
                server_id=server_config.id
            )
        return builder(server_config)

    def _build_stdio_transport(self, server_config: ServerConfig) -> ClientTransport:
        if not server_config.command:
            raise ConfigurationError(
                f"Stdio transport selected for {server_config.id}, but no command provided",
                server_id=server_config.id
            )
        return StdioTransport(
            command=server_config.command,
            args=list(server_config.args),
            env=dict(server_config.env) if server_config.env else None
        )

    def _build_network_transport(self, server_config: ServerConfig) -> ClientTransport:
        if not server_config.address:
            raise ConfigurationError(
                f"Network transport selected for {server_config.id}, but no address provided",
                server_id=server_config.id
            )
        return StreamableHttpTransport(url=server_config.address)

    async def list_tools(self, session: ServerSession) -> List[ToolDefinition]:
        """
        List the tools a server exposes.

        A listing with an unrecognized shape is logged and yields an empty
        list.

        Raises:
            DiscoveryError: If the listing request itself fails
        """
        server_id = session.server_id
        timeout = session.timeout_seconds or self._call_timeout
        logger.info(f"Listing tools for {server_id}...")

        try:
            raw = await asyncio.wait_for(session.client.list_tools(), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise DiscoveryError(
                f"Timed out after {timeout}s listing tools for MCP server {server_id}",
                server_id=server_id
            ) from e
        except Exception as e:
            logger.error(f"Failed to list tools for MCP server {server_id}: {e}")
            raise DiscoveryError(
                f"Failed to list tools for MCP server {server_id}: {e}",
                server_id=server_id
            ) from e

        try:
            tools = parse_tool_listing(raw)
        except DiscoveryError as e:
            logger.warning(f"Unexpected listTools response structure for {server_id}: {e}")
            return []

        logger.info(f"Found {len(tools)} tools for {server_id}: {[tool.name for tool in tools]}")
        return tools

    async def call_tool(self, session: ServerSession, name: str, payload: Dict[str, Any]) -> Any:
        """
        Forward a tool call to a server.

        Returns:
            The result's ``content`` if present, else the result itself

        Raises:
            InvocationError: If the call fails or times out
        """
        server_id = session.server_id
        timeout = session.timeout_seconds or self._call_timeout
        logger.debug(f"Calling tool '{name}' on {server_id} with payload: {payload}")
        self._total_calls += 1

        try:
            result = await asyncio.wait_for(
                session.client.call_tool_mcp(name=name, arguments=payload),
                timeout=timeout
            )
        except asyncio.TimeoutError as e:
            self._total_errors += 1
            raise InvocationError(
                f"Timed out after {timeout}s calling tool {name} on MCP server {server_id}",
                server_id=server_id,
                context={"tool_name": name}
            ) from e
        except Exception as e:
            self._total_errors += 1
            logger.error(f"Failed to call tool {name} on MCP server {server_id}: {e}")
            raise InvocationError(
                f"Failed to call tool {name} on MCP server {server_id}: {e}",
                server_id=server_id,
                context={"tool_name": name}
            ) from e

        if getattr(result, "isError", False):
            logger.warning(f"Tool '{name}' on {server_id} reported an error result")

        return extract_result_content(result)

    async def disconnect(self, server_id: str) -> None:
        """Close and forget the session for a server, plus any stale attempt."""
        async with self._lock:
            session = self._sessions.pop(server_id, None)
            self._pending.pop(server_id, None)

        if session is not None:
            logger.info(f"Disconnecting client for {server_id}...")
            await self._close_quietly(session)

    async def disconnect_all(self) -> None:
        """Disconnect every known server; one failure never stops the sweep."""
        async with self._lock:
            server_ids = list(dict.fromkeys([*self._sessions, *self._pending]))

        for server_id in server_ids:
            try:
                await self.disconnect(server_id)
            except Exception as e:
                logger.error(f"Error disconnecting from MCP server {server_id}: {e}")

    async def _close_quietly(self, session: ServerSession) -> None:
        try:
            await asyncio.wait_for(session.close(), timeout=self._connect_timeout)
            logger.info(f"Client disconnected for {session.server_id}")
        except Exception as e:
            logger.error(f"Error disconnecting from MCP server {session.server_id}: {e}")

    def get_session(self, server_id: str) -> Optional[ServerSession]:
        """Get the live session for a server, if any."""
        return self._sessions.get(server_id)

    def has_pending_connection(self, server_id: str) -> bool:
        return server_id in self._pending

    def get_metrics(self) -> Dict[str, Any]:
        """Get manager metrics."""
        return {
            "connect_attempts": self._connect_attempts,
            "active_sessions": len(self._sessions),
            "pending_connections": len(self._pending),
            "total_calls": self._total_calls,
            "total_errors": self._total_errors,
            "error_rate": self._total_errors / max(self._total_calls, 1),
        }
