"""
Scheduled-job records.
"""

import logging
import uuid as uuid_lib
from typing import Any, Mapping, Union

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.enums import JobStatus, JobType
from ..core.exceptions import JobNotFoundError, PayloadValidationError, PersistenceError
from ..core.models import JobCreate, JobRecord
from ..persistence.orm import JobModel

logger = logging.getLogger(__name__)


def to_job_record(row: JobModel) -> JobRecord:
    return JobRecord(
        id=row.id,
        name=row.name,
        type=JobType(row.type),
        schedule=row.schedule,
        task_id=row.task_id,
        status=JobStatus(row.status),
        metadata=dict(row.job_metadata or {}),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class JobService:
    """Creates, reads and cancels scheduled jobs.

    Each job gets its own task id, under which the actions of its runs
    are recorded.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def create_job(self, data: Union[JobCreate, Mapping[str, Any]]) -> JobRecord:
        """
        Store a new active job.

        Raises:
            PayloadValidationError: If the data is malformed or has neither
                a schedule nor a due date
            PersistenceError: If the insert fails
        """
        try:
            validated = data if isinstance(data, JobCreate) else JobCreate.model_validate(data)
        except ValidationError as e:
            raise PayloadValidationError(f"Invalid job: {e}", context={"errors": e.errors()}) from e

        schedule = validated.resolved_schedule()
        if not schedule:
            raise PayloadValidationError("Either schedule or due_date must be provided")

        row = JobModel(
            id=str(uuid_lib.uuid4()),
            name=validated.name,
            type=validated.type.value,
            schedule=schedule,
            task_id=str(uuid_lib.uuid4()),
            status=JobStatus.ACTIVE.value,
            job_metadata={"description": validated.description, **(validated.metadata or {})},
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(row)
        except SQLAlchemyError as e:
            logger.error(f"Error creating job: {e}")
            raise PersistenceError(f"Failed to create job {validated.name}: {e}") from e

        logger.info(f"Created {row.type} job {row.id} ({row.name}) with schedule '{row.schedule}'")
        return to_job_record(row)

    async def get_job(self, job_id: str) -> JobRecord:
        async with self._session_factory() as session:
            row = await session.get(JobModel, job_id)
            if row is None:
                raise JobNotFoundError("Job not found", context={"job_id": job_id})
            return to_job_record(row)

    async def cancel_job(self, job_id: str) -> JobRecord:
        """Mark a job cancelled. Cancelling twice is harmless."""
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    row = await session.get(JobModel, job_id)
                    if row is None:
                        raise JobNotFoundError("Job not found", context={"job_id": job_id})
                    row.status = JobStatus.CANCELLED.value
                    await session.flush()
                    record = to_job_record(row)
        except SQLAlchemyError as e:
            logger.error(f"Error cancelling job {job_id}: {e}")
            raise PersistenceError(f"Failed to cancel job {job_id}: {e}") from e

        logger.info(f"Cancelled job {job_id}")
        return record
