"""Shared fixtures for the contest tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from contest_app.core.contest_manager import ContestManager
from contest_app.core.errors import StorageError
from contest_app.core.models import (
    CodingExerciseTrial,
    DeliverableTrial,
    Job,
    MCQTrial,
    TextResponseTrial,
    User,
    UserRole,
)
from contest_app.core.services.job_repository import JobRepository
from contest_app.core.services.submission_repository import SubmissionRepository
from contest_app.core.services.user_repository import UserRepository
from contest_app.core.storage.json_store import JsonCollectionStore
from contest_app.integrations.suggestions import OfflineQuestionSuggester

NOW = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime = NOW) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class FlakyStore(JsonCollectionStore):
    """JSON store whose writes fail while ``failing`` is set."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.failing = True

    def save(self, records) -> None:
        if self.failing:
            raise StorageError("disk full")
        super().save(records)


def make_mcq(trial_id: str = "q1", points: int = 10, correct: int = 2, option_count: int = 4) -> MCQTrial:
    return MCQTrial(
        id=trial_id,
        points=points,
        question_text=f"Question {trial_id}",
        options=tuple(f"Option {i}" for i in range(option_count)),
        correct_answer_index=correct,
    )


def make_job(
    job_id: str = "job-1",
    trials: tuple | None = None,
    duration_minutes: int = 0,
    start: datetime | None = None,
    end: datetime | None = None,
    employer_id: str = "employer-1",
) -> Job:
    if trials is None:
        trials = (
            make_mcq("q1", points=10, correct=2),
            make_mcq("q2", points=5, correct=0),
            TextResponseTrial(id="t1", points=10, prompt="Tell us about yourself."),
            CodingExerciseTrial(id="c1", points=20, prompt="Reverse a string."),
            DeliverableTrial(id="d1", points=15, prompt="Upload a 30-60-90 day plan."),
        )
    return Job(
        id=job_id,
        employer_id=employer_id,
        title="Backend Engineer",
        company_name="Acme",
        description="Build services.",
        trials=tuple(trials),
        start_date=start or NOW - timedelta(days=1),
        end_date=end or NOW + timedelta(days=1),
        contest_duration_minutes=duration_minutes,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def job_repository() -> JobRepository:
    return JobRepository()


@pytest.fixture
def submission_repository() -> SubmissionRepository:
    return SubmissionRepository()


@pytest.fixture
def user_repository() -> UserRepository:
    users = UserRepository()
    users.add_user(User(id="candidate-1", email="ada@example.com", role=UserRole.CANDIDATE))
    users.add_user(User(id="candidate-2", email="grace@example.com", role=UserRole.CANDIDATE))
    users.add_user(User(id="employer-1", email="hr@acme.example", role=UserRole.EMPLOYER))
    return users


@pytest.fixture
def manager(job_repository, submission_repository, user_repository, clock):
    contest_manager = ContestManager(
        jobs=job_repository,
        submissions=submission_repository,
        users=user_repository,
        suggester=OfflineQuestionSuggester(delay_seconds=0),
        clock=clock,
    )
    yield contest_manager
    contest_manager.shutdown()
