"""
In-memory shared session state.

This module provides an in-memory implementation of the StateManager
interface. The tool registry publishes its catalog here for the planning
component to read.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from ..core.interfaces import StateManager
from ..core.models import ToolCatalog

logger = logging.getLogger(__name__)


class InMemoryStateManager(StateManager):
    """In-memory implementation of StateManager.

    Only known keys are accepted; ``tools`` holds the published catalog.
    """

    ALLOWED_FIELDS = frozenset({"tools", "context", "metadata"})

    def __init__(self):
        self._state: Dict[str, Any] = {"tools": None, "context": {}, "metadata": {}}
        self._lock = asyncio.Lock()
        logger.info("InMemoryStateManager initialized")

    async def update_session(self, **updates: Any) -> None:
        """Merge updates into the shared state; unknown keys are ignored."""
        async with self._lock:
            for key, value in updates.items():
                if key in self.ALLOWED_FIELDS:
                    self._state[key] = value
                else:
                    logger.warning(f"Ignoring unknown session field: {key}")
            logger.debug(f"Updated session state: {sorted(updates)}")

    async def get_session(self) -> Dict[str, Any]:
        async with self._lock:
            return dict(self._state)

    def get_catalog(self) -> Optional[ToolCatalog]:
        return self._state.get("tools")
