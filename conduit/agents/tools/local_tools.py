"""
Locally executed tools.

Executors here are bound by name to rows of the persisted local-tool
catalog when the registry initializes.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Union

from ..core.interfaces import ToolService

logger = logging.getLogger(__name__)

FINAL_ANSWER_FALLBACK = "Process complete. Final answer delivered."

ToolFunction = Callable[[str, Dict[str, Any]], Union[Any, Awaitable[Any]]]


class FinalAnswerTool(ToolService):
    """Signals the end of a run; returns the answer carried in the payload."""

    async def execute(self, action: str, payload: Dict[str, Any]) -> Any:
        return payload.get("answer") or payload.get("content") or FINAL_ANSWER_FALLBACK


class FunctionTool(ToolService):
    """Adapts a plain sync or async ``(action, payload)`` callable."""

    def __init__(self, func: ToolFunction, name: str = ""):
        self._func = func
        self.name = name or getattr(func, "__name__", "function_tool")

    async def execute(self, action: str, payload: Dict[str, Any]) -> Any:
        logger.debug(f"Executing local tool {self.name} action={action}")
        result = self._func(action, payload)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        return f"FunctionTool(name={self.name!r})"


def default_local_tools() -> Dict[str, ToolService]:
    """Executors available to every runtime unless overridden."""
    return {
        "final_answer": FinalAnswerTool(),
    }
