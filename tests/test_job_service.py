"""
Test cases for scheduled jobs and their service responses.
"""

import pytest

from conduit.agents.core.enums import ErrorKind, JobStatus, JobType
from conduit.agents.core.exceptions import JobNotFoundError, PayloadValidationError
from conduit.agents.utils.responses import respond


@pytest.fixture
def job_data():
    return {
        "name": "Morning digest",
        "description": "Summarize unread mail",
        "type": "cron",
        "schedule": "0 8 * * *",
        "metadata": {"channel": "email"},
    }


class TestJobService:
    """Test cases for JobService."""

    async def test_create_job(self, job_service, job_data):
        job = await job_service.create_job(job_data)

        assert job.type == JobType.CRON
        assert job.status == JobStatus.ACTIVE
        assert job.schedule == "0 8 * * *"
        assert job.metadata == {"description": "Summarize unread mail", "channel": "email"}
        assert job.task_id and job.task_id != job.id

    async def test_due_date_wins_over_schedule(self, job_service, job_data):
        job = await job_service.create_job({
            **job_data, "type": "scheduled", "due_date": "2026-11-01T09:00:00+00:00"
        })
        assert job.schedule == "2026-11-01T09:00:00+00:00"

    async def test_schedule_or_due_date_required(self, job_service, job_data):
        del job_data["schedule"]
        with pytest.raises(PayloadValidationError) as exc_info:
            await job_service.create_job(job_data)
        assert exc_info.value.message == "Either schedule or due_date must be provided"

    @pytest.mark.parametrize("changes", [{"name": ""}, {"type": "hourly"}, {"due_date": "tomorrow"}])
    async def test_invalid_job(self, job_service, job_data, changes):
        with pytest.raises(PayloadValidationError):
            await job_service.create_job({**job_data, **changes})

    async def test_get_job(self, job_service, job_data):
        created = await job_service.create_job(job_data)
        fetched = await job_service.get_job(created.id)
        assert fetched.id == created.id
        assert fetched.name == "Morning digest"

    async def test_get_unknown_job(self, job_service):
        with pytest.raises(JobNotFoundError):
            await job_service.get_job("missing")

    async def test_cancel_job(self, job_service, job_data):
        created = await job_service.create_job(job_data)

        cancelled = await job_service.cancel_job(created.id)

        assert cancelled.status == JobStatus.CANCELLED
        assert (await job_service.get_job(created.id)).status == JobStatus.CANCELLED

    async def test_cancel_unknown_job(self, job_service):
        with pytest.raises(JobNotFoundError):
            await job_service.cancel_job("missing")


class TestServiceResponses:
    """Test cases for failure responses at the service boundary."""

    async def test_success(self, job_service, job_data):
        response = await respond(lambda: job_service.create_job(job_data))

        assert response.success is True
        assert response.status_code == 200
        assert response.data["name"] == "Morning digest"
        assert response.data["status"] == "active"

    async def test_not_found(self, job_service):
        response = await respond(lambda: job_service.get_job("missing"))

        assert response.success is False
        assert response.status_code == 404
        assert response.error == "Job not found"
        assert response.error_kind == ErrorKind.NOT_FOUND

    async def test_validation_error(self, job_service, job_data):
        del job_data["schedule"]
        response = await respond(lambda: job_service.create_job(job_data))

        assert response.status_code == 400
        assert response.error == "Either schedule or due_date must be provided"
        assert response.error_kind == ErrorKind.VALIDATION

    async def test_unexpected_error(self):
        async def broken():
            raise RuntimeError("disk on fire")

        response = await respond(broken)

        assert response.status_code == 500
        assert response.error == "disk on fire"
        assert response.error_kind is None
