"""Service for managing the collection of job contests."""

from __future__ import annotations

from collections.abc import Iterable
import logging

from contest_app.core.availability import ensure_aware
from contest_app.core.errors import NotFoundError, ValidationError
from contest_app.core.models import Job
from contest_app.core.storage.json_store import JsonCollectionStore
from contest_app.core.storage.records import JobRecord
from contest_app.core.trial_rules import validate_job

logger = logging.getLogger(__name__)


class JobRepository:
    """Stores jobs. Jobs are immutable once added and are never removed."""

    def __init__(self, store: JsonCollectionStore[JobRecord] | None = None) -> None:
        self._store = store
        self._jobs: dict[str, Job] = {}
        if store is not None:
            for record in store.load():
                job = record.to_domain()
                self._jobs[job.id] = job

    def add_job(self, job: Job) -> Job:
        if job.id in self._jobs:
            raise ValidationError(f"A job with id {job.id} already exists.")
        prepared = self._prepare_job(job)
        updated = {**self._jobs, prepared.id: prepared}
        self._flush(updated.values())
        self._jobs = updated
        logger.info("Stored job %s (%s)", prepared.id, prepared.title)
        return prepared

    def get_job(self, job_id: str) -> Job:
        job = self._jobs.get(job_id)
        if job is None:
            raise NotFoundError(f"Job {job_id} not found.")
        return job

    def find_job(self, job_id: str) -> Job | None:
        return self._jobs.get(job_id)

    def list_jobs(self) -> list[Job]:
        return list(self._jobs.values())

    def list_jobs_for_employer(self, employer_id: str) -> list[Job]:
        return [job for job in self._jobs.values() if job.employer_id == employer_id]

    def get_job_count(self) -> int:
        return len(self._jobs)

    def _prepare_job(self, job: Job) -> Job:
        """Validate and normalize a job before storage."""
        validate_job(job)
        return Job(
            id=job.id,
            employer_id=job.employer_id,
            title=job.title.strip(),
            company_name=job.company_name.strip(),
            description=job.description.strip(),
            trials=tuple(job.trials),
            start_date=ensure_aware(job.start_date),
            end_date=ensure_aware(job.end_date),
            contest_duration_minutes=job.contest_duration_minutes,
        )

    def _flush(self, jobs: Iterable[Job]) -> None:
        if self._store is not None:
            self._store.save([JobRecord.from_domain(job) for job in jobs])
