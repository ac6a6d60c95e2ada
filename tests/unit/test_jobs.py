import pytest

from autoclips.config import StorageConfig
from autoclips.exceptions import ConfigError
from autoclips.jobs import (
    JobStatus, InMemoryJobRepository, SqlJobRepository, get_job_repository,
)


@pytest.fixture(params=["memory", "sql"])
def repository(request, tmp_path):
    if request.param == "memory":
        return InMemoryJobRepository()
    return SqlJobRepository(f"sqlite:///{tmp_path / 'jobs.db'}")


def test_create_and_get(repository):
    job = repository.create("job-1", processing_type="viral")
    assert job.status == JobStatus.PROCESSING
    assert job.progress == 0.0

    fetched = repository.get("job-1")
    assert fetched.job_id == "job-1"
    assert fetched.processing_type == "viral"
    assert repository.get("missing") is None


def test_duplicate_id_is_rejected(repository):
    repository.create("job-1")
    with pytest.raises(ValueError):
        repository.create("job-1")


def test_update_unknown_job_returns_none(repository):
    assert repository.update("missing", progress=50.0) is None


def test_update_rejects_unknown_fields(repository):
    repository.create("job-1")
    with pytest.raises(ValueError):
        repository.update("job-1", colour="blue")


def test_complete(repository):
    repository.create("job-1")
    repository.update("job-1", progress=40.0, current_step="Selecting segments")
    assert repository.get("job-1").current_step == "Selecting segments"

    segments = [{"kind": "sequential", "start_s": 0.0, "end_s": 70.0}]
    job = repository.complete("job-1", segments, ["window 2 failed: boom"])
    assert job.status == JobStatus.COMPLETED
    assert job.progress == 100.0

    fetched = repository.get("job-1")
    assert fetched.segments == segments
    assert fetched.warnings == ["window 2 failed: boom"]


def test_fail(repository):
    repository.create("job-1")
    repository.fail("job-1", "transcript missing")
    job = repository.get("job-1")
    assert job.status == JobStatus.FAILED
    assert job.error == "transcript missing"


def test_memory_snapshots_are_copies():
    repository = InMemoryJobRepository()
    job = repository.create("job-1")
    job.progress = 99.0
    assert repository.get("job-1").progress == 0.0


def test_get_job_repository(tmp_path):
    assert isinstance(get_job_repository(StorageConfig()), InMemoryJobRepository)
    sql = get_job_repository(StorageConfig(backend="sql", database_url=f"sqlite:///{tmp_path / 'a.db'}"))
    assert isinstance(sql, SqlJobRepository)
    with pytest.raises(ConfigError):
        get_job_repository(StorageConfig(backend="redis"))
