"""
Job bookkeeping for pipeline runs.

A job tracks one planning run from creation to completion or failure.
Two backends share one interface: a process-local dict and a SQLAlchemy
table for runs that must survive the process.
"""
from __future__ import annotations
import json
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from autoclips.config import StorageConfig
from autoclips.exceptions import ConfigError
from autoclips.jobs.models import Base, JobRecord, JobStatus

logger = logging.getLogger(__name__)

_UPDATABLE = {"status", "progress", "current_step", "processing_type", "segments", "warnings", "error"}


@dataclass
class Job:
    """Snapshot of a job's state."""
    job_id: str
    status: JobStatus = JobStatus.PROCESSING
    progress: float = 0.0
    current_step: str = "Starting"
    processing_type: str = "sequential"
    segments: List[Dict[str, Any]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)


class JobRepository(ABC):
    """Abstract interface for job storage."""

    @abstractmethod
    def create(self, job_id: str, processing_type: str = "sequential") -> Job:
        """Register a new job; raises ValueError if the id exists."""
        pass

    @abstractmethod
    def get(self, job_id: str) -> Optional[Job]:
        pass

    @abstractmethod
    def update(self, job_id: str, **fields: Any) -> Optional[Job]:
        """Apply field updates; returns None for an unknown id."""
        pass

    def complete(self, job_id: str, segments: List[Dict[str, Any]], warnings: Optional[List[str]] = None) -> Optional[Job]:
        updates: Dict[str, Any] = {
            "status": JobStatus.COMPLETED,
            "progress": 100.0,
            "current_step": "Done",
            "segments": segments,
        }
        if warnings is not None:
            updates["warnings"] = warnings
        return self.update(job_id, **updates)

    def fail(self, job_id: str, error: str) -> Optional[Job]:
        return self.update(job_id, status=JobStatus.FAILED, current_step="Failed", error=error)


def _check_fields(fields: Dict[str, Any]) -> None:
    unknown = set(fields) - _UPDATABLE
    if unknown:
        raise ValueError(f"Unknown job fields: {', '.join(sorted(unknown))}")


class InMemoryJobRepository(JobRepository):
    """Process-local job store."""

    def __init__(self):
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()

    def create(self, job_id: str, processing_type: str = "sequential") -> Job:
        with self._lock:
            if job_id in self._jobs:
                raise ValueError(f"Job '{job_id}' already exists")
            job = Job(job_id=job_id, processing_type=processing_type)
            self._jobs[job_id] = job
            return replace(job)

    def get(self, job_id: str) -> Optional[Job]:
        with self._lock:
            job = self._jobs.get(job_id)
            return replace(job) if job else None

    def update(self, job_id: str, **fields: Any) -> Optional[Job]:
        _check_fields(fields)
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            job = replace(job, updated_at=datetime.utcnow(), **fields)
            self._jobs[job_id] = job
            return replace(job)


class SqlJobRepository(JobRepository):
    """Job store backed by a SQLAlchemy database."""

    def __init__(self, database_url: str = "sqlite:///autoclips.db", echo: bool = False):
        self.engine = create_engine(database_url, echo=echo)
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)
        Base.metadata.create_all(self.engine)

    @staticmethod
    def _to_job(record: JobRecord) -> Job:
        return Job(
            job_id=record.id,
            status=record.status,
            progress=record.progress,
            current_step=record.current_step,
            processing_type=record.processing_type,
            segments=json.loads(record.segments_json or "[]"),
            warnings=json.loads(record.warnings_json or "[]"),
            error=record.error_message,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

    def create(self, job_id: str, processing_type: str = "sequential") -> Job:
        with self.Session() as session:
            if session.get(JobRecord, job_id) is not None:
                raise ValueError(f"Job '{job_id}' already exists")
            now = datetime.utcnow()
            record = JobRecord(
                id=job_id,
                status=JobStatus.PROCESSING,
                progress=0.0,
                current_step="Starting",
                processing_type=processing_type,
                segments_json="[]",
                warnings_json="[]",
                created_at=now,
                updated_at=now,
            )
            session.add(record)
            session.commit()
            return self._to_job(record)

    def get(self, job_id: str) -> Optional[Job]:
        with self.Session() as session:
            record = session.get(JobRecord, job_id)
            return self._to_job(record) if record else None

    def update(self, job_id: str, **fields: Any) -> Optional[Job]:
        _check_fields(fields)
        with self.Session() as session:
            record = session.get(JobRecord, job_id)
            if record is None:
                return None
            for key, value in fields.items():
                if key == "segments":
                    record.segments_json = json.dumps(value, ensure_ascii=False)
                elif key == "warnings":
                    record.warnings_json = json.dumps(value, ensure_ascii=False)
                elif key == "error":
                    record.error_message = value
                else:
                    setattr(record, key, value)
            record.updated_at = datetime.utcnow()
            session.commit()
            return self._to_job(record)


def get_job_repository(cfg: StorageConfig) -> JobRepository:
    """Factory for the configured backend."""
    if cfg.backend == "memory":
        return InMemoryJobRepository()
    if cfg.backend == "sql":
        logger.info(f"Using SQL job store at {cfg.database_url}")
        return SqlJobRepository(cfg.database_url)
    raise ConfigError(f"Unknown storage backend '{cfg.backend}'")
