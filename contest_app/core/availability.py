"""Availability windowing for job contests."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone

from contest_app.core.models import Job, Submission


@dataclass(frozen=True, slots=True)
class JobListing:
    """A job as shown to a candidate. Availability and completion are independent."""

    job: Job
    is_available: bool
    is_completed: bool

    @property
    def can_start(self) -> bool:
        return self.is_available and not self.is_completed


def ensure_aware(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def is_job_available(job: Job, now: datetime) -> bool:
    now = ensure_aware(now)
    return ensure_aware(job.start_date) <= now <= ensure_aware(job.end_date)


def build_candidate_listings(
    jobs: Iterable[Job],
    submissions: Iterable[Submission],
    candidate_id: str,
    now: datetime,
) -> list[JobListing]:
    """Return the jobs open at ``now``, flagging the ones this candidate already completed."""
    completed_job_ids = {s.job_id for s in submissions if s.candidate_id == candidate_id}
    listings: list[JobListing] = []
    for job in jobs:
        if not is_job_available(job, now):
            continue
        listings.append(
            JobListing(job=job, is_available=True, is_completed=job.id in completed_job_ids)
        )
    return listings
