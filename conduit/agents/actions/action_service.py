"""
Persisted actions and their terminal transitions.
"""

import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Union

from pydantic import ValidationError
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from ..core.enums import ActionStatus
from ..core.exceptions import (
    ActionNotFoundError,
    InvalidStateTransitionError,
    PayloadValidationError,
    PersistenceError,
)
from ..core.models import ActionCreate, ActionRecord, ActionUpdate, DocumentRecord
from ..persistence.orm import ActionModel
from .document_service import ACTION_RESULT_METADATA, DocumentService, to_document_record
from .result_normalizer import canonical_text

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_action_record(row: ActionModel, documents: Optional[List[DocumentRecord]] = None) -> ActionRecord:
    if documents is None:
        documents = [to_document_record(document) for document in row.documents]
    return ActionRecord(
        id=row.id,
        task_id=row.task_id,
        tool_id=row.tool_id,
        name=row.name,
        type=row.type,
        sequence=row.sequence,
        status=ActionStatus(row.status),
        payload=row.payload,
        result=row.result,
        created_at=row.created_at,
        updated_at=row.updated_at,
        documents=documents,
    )


class ActionService:
    """
    Store of tool invocations.

    This class handles:
    - Validated creation and partial update of actions
    - Completing an action with a raw tool result, deriving a document
      from its canonical text in the same transaction
    - Failing an action with an error message

    An action leaves ``pending`` exactly once; a completed or failed action
    never changes status again.

    Usage:
        service = ActionService(session_factory)
        action = await service.create_action({...})
        action = await service.update_action_with_result(action.id, raw_result)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        document_service: Optional[DocumentService] = None
    ):
        self._session_factory = session_factory
        self._documents = document_service or DocumentService()

    async def create_action(self, data: Union[ActionCreate, Mapping[str, Any]]) -> ActionRecord:
        """
        Insert a new action.

        Raises:
            PayloadValidationError: If the data does not describe a valid action
            PersistenceError: If the insert fails
        """
        try:
            validated = data if isinstance(data, ActionCreate) else ActionCreate.model_validate(data)
        except ValidationError as e:
            raise PayloadValidationError(f"Invalid action: {e}", context={"errors": e.errors()}) from e

        row = ActionModel(
            id=validated.id,
            task_id=validated.task_id,
            tool_id=validated.tool_id,
            name=validated.name,
            type=validated.type,
            sequence=validated.sequence,
            status=validated.status.value,
            payload=validated.payload,
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(row)
        except SQLAlchemyError as e:
            logger.error(f"Failed to create action {validated.id}: {e}")
            raise PersistenceError(f"Failed to create action {validated.id}: {e}") from e

        logger.info(f"Created action {row.id} ({row.name}) for task {row.task_id}")
        return to_action_record(row, documents=[])

    async def get_action(self, action_id: str) -> ActionRecord:
        async with self._session_factory() as session:
            row = await self._load(session, action_id)
            if row is None:
                raise ActionNotFoundError(f"Action not found: {action_id}", context={"action_id": action_id})
            return to_action_record(row)

    async def update_action(
        self,
        action_id: str,
        updates: Union[ActionUpdate, Mapping[str, Any]]
    ) -> ActionRecord:
        """
        Apply a partial update and stamp ``updated_at``.

        Raises:
            PayloadValidationError: If the updates are malformed
            ActionNotFoundError: If the action does not exist
            InvalidStateTransitionError: If the status would leave a terminal state
            PersistenceError: If the write fails
        """
        try:
            validated = updates if isinstance(updates, ActionUpdate) else ActionUpdate.model_validate(updates)
        except ValidationError as e:
            raise PayloadValidationError(f"Invalid action update: {e}", context={"errors": e.errors()}) from e

        changes = validated.model_dump(exclude_unset=True)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    row = await self._load(session, action_id)
                    if row is None:
                        raise ActionNotFoundError(
                            f"Action not found: {action_id}", context={"action_id": action_id}
                        )

                    new_status = changes.get("status")
                    if new_status is not None:
                        current = ActionStatus(row.status)
                        if current.is_terminal and new_status != current:
                            raise InvalidStateTransitionError(
                                f"Action {action_id} is already {current.value}",
                                context={"action_id": action_id, "status": current.value},
                            )
                        changes["status"] = ActionStatus(new_status).value

                    for field, value in changes.items():
                        setattr(row, field, value)
                    row.updated_at = _utcnow()
                    record = to_action_record(row)
        except SQLAlchemyError as e:
            logger.error(f"Failed to update action {action_id}: {e}")
            raise PersistenceError(f"Failed to update action {action_id}: {e}") from e

        logger.debug(f"Updated action {action_id}: {sorted(changes)}")
        return record

    async def update_action_with_result(self, action_id: str, raw_result: Any) -> ActionRecord:
        """
        Complete an action with a raw tool result.

        The canonical text becomes the action's result and, when non-empty,
        a linked document. The status write, the document and the link
        commit together or not at all.

        Raises:
            ActionNotFoundError: If the action does not exist
            InvalidStateTransitionError: If the action is no longer pending
            PersistenceError: If the transaction fails
        """
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    text = canonical_text(raw_result)
                    task_id = await self._transition(session, action_id, ActionStatus.COMPLETED, text)

                    if text:
                        document = await self._documents.create_document(
                            session,
                            text=text,
                            conversation_id=task_id,
                            source_id=task_id,
                            action_id=action_id,
                            metadata=ACTION_RESULT_METADATA,
                            should_index=True,
                        )
                        await self._documents.link_to_action(session, action_id, document.id)
                        logger.info(f"Stored result document {document.id} for action {action_id}")
                    else:
                        logger.warning(f"Result for action {action_id} is empty, no document created")

                    row = await self._load(session, action_id)
                    record = to_action_record(row)
        except SQLAlchemyError as e:
            logger.error(f"Failed to store result for action {action_id}: {e}")
            raise PersistenceError(f"Failed to store result for action {action_id}: {e}") from e

        return record

    async def fail_action(self, action_id: str, error: Union[str, BaseException]) -> ActionRecord:
        """Mark a pending action failed, storing the error message as its result."""
        message = str(error)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await self._transition(session, action_id, ActionStatus.FAILED, message)
                    row = await self._load(session, action_id)
                    record = to_action_record(row)
        except SQLAlchemyError as e:
            logger.error(f"Failed to mark action {action_id} failed: {e}")
            raise PersistenceError(f"Failed to mark action {action_id} failed: {e}") from e

        logger.info(f"Action {action_id} failed: {message}")
        return record

    async def _transition(
        self,
        session: AsyncSession,
        action_id: str,
        status: ActionStatus,
        result: str
    ) -> str:
        """Move a pending action to a terminal status; returns its task id."""
        outcome = await session.execute(
            update(ActionModel)
            .where(ActionModel.id == action_id, ActionModel.status == ActionStatus.PENDING.value)
            .values(status=status.value, result=result, updated_at=_utcnow())
            .returning(ActionModel.task_id)
        )
        task_id = outcome.scalar_one_or_none()
        if task_id is not None:
            return task_id

        current = await session.scalar(select(ActionModel.status).where(ActionModel.id == action_id))
        if current is None:
            raise ActionNotFoundError(f"Action not found: {action_id}", context={"action_id": action_id})
        raise InvalidStateTransitionError(
            f"Action {action_id} is already {current}",
            context={"action_id": action_id, "status": current},
        )

    async def _load(self, session: AsyncSession, action_id: str) -> Optional[ActionModel]:
        return await session.scalar(
            select(ActionModel)
            .options(selectinload(ActionModel.documents))
            .where(ActionModel.id == action_id)
            .execution_options(populate_existing=True)
        )
