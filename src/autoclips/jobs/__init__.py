from autoclips.jobs.models import JobStatus
from autoclips.jobs.repository import (
    Job,
    JobRepository,
    InMemoryJobRepository,
    SqlJobRepository,
    get_job_repository,
)

__all__ = [
    "JobStatus",
    "Job",
    "JobRepository",
    "InMemoryJobRepository",
    "SqlJobRepository",
    "get_job_repository",
]
