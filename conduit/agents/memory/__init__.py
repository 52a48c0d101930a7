"""
Shared state for the planning component.
"""

from .state_manager import InMemoryStateManager

__all__ = [
    "InMemoryStateManager",
]
