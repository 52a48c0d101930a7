"""
Callable bound to one tool on a remote capability server.
"""

import logging
from typing import Any, Dict, FrozenSet, Iterable

from ..core.interfaces import ToolService
from ..core.models import ServerConfig
from .connection_manager import ConnectionManager

logger = logging.getLogger(__name__)

DEFAULT_INTERNAL_FIELDS: FrozenSet[str] = frozenset({"conversation_id", "conversation_uuid"})


def strip_internal_fields(payload: Dict[str, Any], internal_fields: Iterable[str]) -> Dict[str, Any]:
    """Return a copy of the payload without agent-internal routing keys."""
    internal = set(internal_fields)
    return {key: value for key, value in (payload or {}).items() if key not in internal}


class RemoteToolService(ToolService):
    """Forwards invocations to a remote tool through the connection manager.

    The session is looked up on every call, so a server that was
    disconnected is reconnected transparently.
    """

    def __init__(
        self,
        connection_manager: ConnectionManager,
        server_config: ServerConfig,
        remote_name: str,
        internal_fields: Iterable[str] = DEFAULT_INTERNAL_FIELDS
    ):
        self._connection_manager = connection_manager
        self.server_config = server_config
        self.remote_name = remote_name
        self._internal_fields = frozenset(internal_fields)

    @property
    def key(self) -> str:
        return f"{self.server_config.id}/{self.remote_name}"

    async def execute(self, action: str, payload: Dict[str, Any]) -> Any:
        """
        Call the remote tool.

        Args:
            action: Remote tool name requested by the planner; the bound
                tool name is used when empty or when the catalog key is given
            payload: Tool arguments plus any internal routing fields

        Raises:
            InvocationError: If the remote call fails
        """
        session = await self._connection_manager.get_client(self.server_config)
        arguments = strip_internal_fields(payload, self._internal_fields)
        name = self.remote_name if action in ("", self.key) else action
        return await self._connection_manager.call_tool(session, name, arguments)

    def __repr__(self) -> str:
        return f"RemoteToolService(key={self.key!r})"
