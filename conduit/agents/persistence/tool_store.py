"""
Persisted catalog of local-tool metadata.
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.exceptions import PersistenceError
from ..core.interfaces import ToolCatalogStore
from ..core.models import ToolMetadata
from .orm import ToolModel

logger = logging.getLogger(__name__)


def _to_metadata(row: ToolModel) -> ToolMetadata:
    return ToolMetadata(
        id=row.id,
        name=row.name,
        description=row.description,
        instruction=row.instruction,
    )


class ToolStore(ToolCatalogStore):
    """SQL-backed store of local tools, read during registry initialization."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_available_tools(self) -> List[ToolMetadata]:
        async with self._session_factory() as session:
            rows = await session.scalars(select(ToolModel).order_by(ToolModel.name))
            return [_to_metadata(row) for row in rows]

    async def upsert_tool(self, metadata: ToolMetadata) -> ToolMetadata:
        """Insert a tool, or update the row that already has its name."""
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    row = await session.scalar(select(ToolModel).where(ToolModel.name == metadata.name))
                    if row is None:
                        row = ToolModel(
                            id=metadata.id,
                            name=metadata.name,
                            description=metadata.description,
                            instruction=metadata.instruction,
                        )
                        session.add(row)
                        logger.info(f"Stored native tool '{metadata.name}'")
                    else:
                        row.description = metadata.description
                        row.instruction = metadata.instruction
                        logger.info(f"Updated native tool '{metadata.name}'")
                return _to_metadata(row)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to store tool {metadata.name}: {e}") from e
