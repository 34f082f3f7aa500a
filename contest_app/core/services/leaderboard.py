"""Leaderboard ranking over the submissions for one job."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime

from contest_app.constants.contest_constants import UNKNOWN_CANDIDATE_LABEL
from contest_app.core.availability import ensure_aware
from contest_app.core.models import Submission


@dataclass(frozen=True, slots=True)
class LeaderboardRow:
    """Immutable snapshot returned to consumers."""

    rank: int
    submission_id: str
    candidate_id: str
    candidate_email: str
    score: int
    total: int
    duration_seconds: int
    submission_time: datetime

    @property
    def percentage(self) -> float:
        if self.total <= 0:
            return 0.0
        return (self.score / self.total) * 100


def ranking_key(submission: Submission) -> tuple[int, int, datetime, str]:
    """Higher score first, then faster completion, then earlier submission, then id."""
    return (
        -submission.score,
        submission.duration_seconds,
        ensure_aware(submission.submission_time),
        submission.id,
    )


def rank_submissions(
    submissions: Iterable[Submission],
    candidate_emails: Mapping[str, str] | None = None,
) -> list[LeaderboardRow]:
    """Return every submission with its 1-based position. Ties never share a rank."""
    emails = candidate_emails or {}
    ordered = sorted(submissions, key=ranking_key)
    return [
        LeaderboardRow(
            rank=position,
            submission_id=submission.id,
            candidate_id=submission.candidate_id,
            candidate_email=emails.get(submission.candidate_id, UNKNOWN_CANDIDATE_LABEL),
            score=submission.score,
            total=submission.total,
            duration_seconds=submission.duration_seconds,
            submission_time=submission.submission_time,
        )
        for position, submission in enumerate(ordered, start=1)
    ]
