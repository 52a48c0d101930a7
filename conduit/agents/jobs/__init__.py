"""
Scheduled jobs.
"""

from .job_service import JobService, to_job_record

__all__ = [
    "JobService",
    "to_job_record",
]
