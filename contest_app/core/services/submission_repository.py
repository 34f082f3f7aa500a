"""Service for storing finalized submissions."""

from __future__ import annotations

import logging

from contest_app.core.errors import DuplicateSubmissionError, NotFoundError, ValidationError
from contest_app.core.models import Submission
from contest_app.core.storage.json_store import JsonCollectionStore
from contest_app.core.storage.records import SubmissionRecord

logger = logging.getLogger(__name__)


class SubmissionRepository:
    """Append-only store of submissions, one per candidate and job."""

    def __init__(self, store: JsonCollectionStore[SubmissionRecord] | None = None) -> None:
        self._store = store
        self._submissions: list[Submission] = []
        if store is not None:
            self._submissions = [record.to_domain() for record in store.load()]

    def add_submission(self, submission: Submission) -> Submission:
        if not 0 <= submission.score <= submission.total:
            raise ValidationError("Submission score must lie between zero and the total.")
        if any(existing.id == submission.id for existing in self._submissions):
            raise ValidationError(f"A submission with id {submission.id} already exists.")
        if self.has_submission(submission.candidate_id, submission.job_id):
            raise DuplicateSubmissionError("You have already completed this contest.")
        updated = [*self._submissions, submission]
        self._flush(updated)
        self._submissions = updated
        logger.info(
            "Stored submission %s for job %s (candidate %s)",
            submission.id,
            submission.job_id,
            submission.candidate_id,
        )
        return submission

    def get_submission(self, submission_id: str) -> Submission:
        found = next((s for s in self._submissions if s.id == submission_id), None)
        if found is None:
            raise NotFoundError(f"Submission {submission_id} not found.")
        return found

    def has_submission(self, candidate_id: str, job_id: str) -> bool:
        return any(
            s.candidate_id == candidate_id and s.job_id == job_id for s in self._submissions
        )

    def list_submissions(self) -> list[Submission]:
        return list(self._submissions)

    def list_for_job(self, job_id: str) -> list[Submission]:
        return [s for s in self._submissions if s.job_id == job_id]

    def list_for_candidate(self, candidate_id: str) -> list[Submission]:
        return [s for s in self._submissions if s.candidate_id == candidate_id]

    def count_for_job(self, job_id: str) -> int:
        return sum(1 for s in self._submissions if s.job_id == job_id)

    def _flush(self, submissions: list[Submission]) -> None:
        if self._store is not None:
            self._store.save([SubmissionRecord.from_domain(s) for s in submissions])
