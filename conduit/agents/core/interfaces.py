"""
Core interfaces for the tool-orchestration layer.

This module defines the contracts that executors, catalog stores and shared
state holders must implement to take part in tool registration.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional

from .models import ToolMetadata, ToolCatalog


class ToolService(ABC):
    """Executor bound to one catalog entry.

    The planner invokes ``execute(action, payload)``; the payload may carry
    internal routing fields that remote tools must never see.
    """

    @abstractmethod
    async def execute(self, action: str, payload: Dict[str, Any]) -> Any:
        """Run the tool.

        Args:
            action: Operation requested by the planner
            payload: Arguments for the operation

        Returns:
            Raw tool result, in whatever shape the tool produces
        """
        pass


class ToolCatalogStore(ABC):
    """Persisted catalog of local-tool metadata."""

    @abstractmethod
    async def get_available_tools(self) -> List[ToolMetadata]:
        """Return every local tool the store knows about."""
        pass


class StateManager(ABC):
    """Shared session state read by the planning component."""

    @abstractmethod
    async def update_session(self, **updates: Any) -> None:
        """Merge updates into the shared session state."""
        pass

    @abstractmethod
    async def get_session(self) -> Dict[str, Any]:
        """Return a snapshot of the shared session state."""
        pass

    @abstractmethod
    def get_catalog(self) -> Optional[ToolCatalog]:
        """Return the most recently published tool catalog."""
        pass
