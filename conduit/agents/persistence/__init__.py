"""
Persistence for tools, actions, documents and jobs.
"""

from .database import create_engine, create_session_factory, init_models, close_engine
from .orm import Base, ToolModel, ActionModel, DocumentModel, ActionDocumentModel, JobModel
from .tool_store import ToolStore

__all__ = [
    "create_engine",
    "create_session_factory",
    "init_models",
    "close_engine",
    "Base",
    "ToolModel",
    "ActionModel",
    "DocumentModel",
    "ActionDocumentModel",
    "JobModel",
    "ToolStore",
]
