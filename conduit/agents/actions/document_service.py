"""
Documents derived from action results.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.models import DocumentRecord
from ..persistence.orm import ActionDocumentModel, DocumentModel

logger = logging.getLogger(__name__)

ACTION_RESULT_METADATA: Dict[str, Any] = {
    "type": "text",
    "content_type": "full",
    "source": "action_result",
}


def to_document_record(row: DocumentModel) -> DocumentRecord:
    return DocumentRecord(
        id=row.id,
        text=row.text,
        conversation_id=row.conversation_id,
        source_id=row.source_id,
        action_id=row.action_id,
        metadata=dict(row.doc_metadata or {}),
        should_index=row.should_index,
        created_at=row.created_at,
    )


class DocumentService:
    """Creates documents inside a transaction owned by the caller.

    Nothing here commits; the caller's transaction decides whether the
    document and its link survive.
    """

    async def create_document(
        self,
        session: AsyncSession,
        text: str,
        conversation_id: Optional[str] = None,
        source_id: Optional[str] = None,
        action_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        should_index: bool = False
    ) -> DocumentModel:
        document = DocumentModel(
            text=text,
            conversation_id=conversation_id,
            source_id=source_id,
            action_id=action_id,
            doc_metadata=dict(metadata or {}),
            should_index=should_index,
        )
        session.add(document)
        await session.flush()
        logger.debug(f"Created document {document.id} ({len(text)} chars)")
        return document

    async def link_to_action(self, session: AsyncSession, action_id: str, document_id: str) -> None:
        session.add(ActionDocumentModel(action_id=action_id, document_id=document_id))
        await session.flush()
