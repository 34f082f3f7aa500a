"""Domain models for the contest application."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Union


class TrialType(str, Enum):
    """Tag identifying which variant a trial is."""

    MCQ = "MCQ"
    TEXT_RESPONSE = "TEXT_RESPONSE"
    CODING_EXERCISE = "CODING_EXERCISE"
    DELIVERABLE = "DELIVERABLE"


AUTO_GRADED_TRIAL_TYPES: frozenset[TrialType] = frozenset({TrialType.MCQ})
PROMPT_TRIAL_TYPES: frozenset[TrialType] = frozenset(
    {TrialType.TEXT_RESPONSE, TrialType.CODING_EXERCISE, TrialType.DELIVERABLE}
)


@dataclass(frozen=True, slots=True)
class MCQTrial:
    """Multiple-choice trial, the only auto-graded variant."""

    id: str
    points: int
    question_text: str
    options: tuple[str, ...]
    correct_answer_index: int = 0
    type: TrialType = field(default=TrialType.MCQ, init=False)


@dataclass(frozen=True, slots=True)
class TextResponseTrial:
    id: str
    points: int
    prompt: str
    type: TrialType = field(default=TrialType.TEXT_RESPONSE, init=False)


@dataclass(frozen=True, slots=True)
class CodingExerciseTrial:
    id: str
    points: int
    prompt: str
    type: TrialType = field(default=TrialType.CODING_EXERCISE, init=False)


@dataclass(frozen=True, slots=True)
class DeliverableTrial:
    """Trial answered by uploading a file; the payload is never interpreted."""

    id: str
    points: int
    prompt: str
    type: TrialType = field(default=TrialType.DELIVERABLE, init=False)


Trial = Union[MCQTrial, TextResponseTrial, CodingExerciseTrial, DeliverableTrial]


@dataclass(frozen=True, slots=True)
class DeliverableFile:
    """Named opaque blob submitted for a deliverable trial."""

    file_name: str
    payload: bytes


AnswerValue = Union[int, str, DeliverableFile]


@dataclass(frozen=True, slots=True)
class Answer:
    trial_id: str
    value: AnswerValue


@dataclass(frozen=True, slots=True)
class Job:
    """Employer-defined contest: ordered trials, availability window and time limit."""

    id: str
    employer_id: str
    title: str
    company_name: str
    description: str
    trials: tuple[Trial, ...]
    start_date: datetime
    end_date: datetime
    contest_duration_minutes: int = 0

    @property
    def is_timed(self) -> bool:
        return self.contest_duration_minutes > 0

    @property
    def time_limit_seconds(self) -> int | None:
        if not self.is_timed:
            return None
        return self.contest_duration_minutes * 60

    def get_trial(self, trial_id: str) -> Trial | None:
        return next((trial for trial in self.trials if trial.id == trial_id), None)


@dataclass(frozen=True, slots=True)
class Submission:
    """Finalized, immutable record of one candidate's attempt at a job."""

    id: str
    job_id: str
    candidate_id: str
    answers: tuple[Answer, ...]
    score: int
    total: int
    submission_time: datetime
    duration_seconds: int

    def answer_for(self, trial_id: str) -> Answer | None:
        return next((answer for answer in self.answers if answer.trial_id == trial_id), None)


class UserRole(str, Enum):
    EMPLOYER = "EMPLOYER"
    CANDIDATE = "CANDIDATE"


@dataclass(frozen=True, slots=True)
class User:
    """Registered or anonymous account. Anonymous users carry no password hash."""

    id: str
    email: str
    role: UserRole
    password_hash: str | None = None


def trial_display_text(trial: Trial) -> str:
    """Return the text a candidate sees for a trial."""
    if trial.type is TrialType.MCQ:
        return trial.question_text
    if trial.type in PROMPT_TRIAL_TYPES:
        return trial.prompt
    raise ValueError(f"Unknown trial type: {trial.type!r}")
