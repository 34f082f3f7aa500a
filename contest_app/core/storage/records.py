"""pydantic schemas describing how users, jobs and submissions are persisted.

The stored documents use camelCase keys and tag each trial with its
``type`` so the trial union round-trips without guessing. Deliverable
payloads are kept as base64 text.
"""

from __future__ import annotations

import base64
from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

from contest_app.core.models import (
    Answer,
    CodingExerciseTrial,
    DeliverableFile,
    DeliverableTrial,
    Job,
    MCQTrial,
    Submission,
    TextResponseTrial,
    Trial,
    TrialType,
    User,
    UserRole,
)


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MCQTrialRecord(_Record):
    type: Literal["MCQ"] = "MCQ"
    id: str
    points: int
    question_text: str
    options: list[str]
    correct_answer_index: int


class TextResponseTrialRecord(_Record):
    type: Literal["TEXT_RESPONSE"] = "TEXT_RESPONSE"
    id: str
    points: int
    prompt: str


class CodingExerciseTrialRecord(_Record):
    type: Literal["CODING_EXERCISE"] = "CODING_EXERCISE"
    id: str
    points: int
    prompt: str


class DeliverableTrialRecord(_Record):
    type: Literal["DELIVERABLE"] = "DELIVERABLE"
    id: str
    points: int
    prompt: str


TrialRecord = Annotated[
    Union[MCQTrialRecord, TextResponseTrialRecord, CodingExerciseTrialRecord, DeliverableTrialRecord],
    Field(discriminator="type"),
]


def trial_to_record(trial: Trial) -> TrialRecord:
    if trial.type is TrialType.MCQ:
        return MCQTrialRecord(
            id=trial.id,
            points=trial.points,
            question_text=trial.question_text,
            options=list(trial.options),
            correct_answer_index=trial.correct_answer_index,
        )
    if trial.type is TrialType.TEXT_RESPONSE:
        return TextResponseTrialRecord(id=trial.id, points=trial.points, prompt=trial.prompt)
    if trial.type is TrialType.CODING_EXERCISE:
        return CodingExerciseTrialRecord(id=trial.id, points=trial.points, prompt=trial.prompt)
    if trial.type is TrialType.DELIVERABLE:
        return DeliverableTrialRecord(id=trial.id, points=trial.points, prompt=trial.prompt)
    raise ValueError(f"Unknown trial type: {trial.type!r}")


def trial_from_record(record: TrialRecord) -> Trial:
    if record.type == "MCQ":
        return MCQTrial(
            id=record.id,
            points=record.points,
            question_text=record.question_text,
            options=tuple(record.options),
            correct_answer_index=record.correct_answer_index,
        )
    if record.type == "TEXT_RESPONSE":
        return TextResponseTrial(id=record.id, points=record.points, prompt=record.prompt)
    if record.type == "CODING_EXERCISE":
        return CodingExerciseTrial(id=record.id, points=record.points, prompt=record.prompt)
    if record.type == "DELIVERABLE":
        return DeliverableTrial(id=record.id, points=record.points, prompt=record.prompt)
    raise ValueError(f"Unknown trial record type: {record.type!r}")


class JobRecord(_Record):
    id: str
    employer_id: str
    title: str
    company_name: str
    description: str
    trials: list[TrialRecord]
    start_date: datetime
    end_date: datetime
    contest_duration_minutes: int = 0

    @classmethod
    def from_domain(cls, job: Job) -> "JobRecord":
        return cls(
            id=job.id,
            employer_id=job.employer_id,
            title=job.title,
            company_name=job.company_name,
            description=job.description,
            trials=[trial_to_record(trial) for trial in job.trials],
            start_date=job.start_date,
            end_date=job.end_date,
            contest_duration_minutes=job.contest_duration_minutes,
        )

    def to_domain(self) -> Job:
        return Job(
            id=self.id,
            employer_id=self.employer_id,
            title=self.title,
            company_name=self.company_name,
            description=self.description,
            trials=tuple(trial_from_record(trial) for trial in self.trials),
            start_date=self.start_date,
            end_date=self.end_date,
            contest_duration_minutes=self.contest_duration_minutes,
        )


class DeliverableFileRecord(_Record):
    file_name: str
    data_base64: str


class AnswerRecord(_Record):
    trial_id: str
    value: Union[StrictInt, StrictStr, DeliverableFileRecord]

    @classmethod
    def from_domain(cls, answer: Answer) -> "AnswerRecord":
        value = answer.value
        if isinstance(value, DeliverableFile):
            value = DeliverableFileRecord(
                file_name=value.file_name,
                data_base64=base64.b64encode(value.payload).decode("ascii"),
            )
        return cls(trial_id=answer.trial_id, value=value)

    def to_domain(self) -> Answer:
        value = self.value
        if isinstance(value, DeliverableFileRecord):
            value = DeliverableFile(
                file_name=value.file_name,
                payload=base64.b64decode(value.data_base64),
            )
        return Answer(trial_id=self.trial_id, value=value)


class SubmissionRecord(_Record):
    id: str
    job_id: str
    candidate_id: str
    answers: list[AnswerRecord]
    score: int
    total: int
    submission_time: datetime
    duration_seconds: int

    @classmethod
    def from_domain(cls, submission: Submission) -> "SubmissionRecord":
        return cls(
            id=submission.id,
            job_id=submission.job_id,
            candidate_id=submission.candidate_id,
            answers=[AnswerRecord.from_domain(answer) for answer in submission.answers],
            score=submission.score,
            total=submission.total,
            submission_time=submission.submission_time,
            duration_seconds=submission.duration_seconds,
        )

    def to_domain(self) -> Submission:
        return Submission(
            id=self.id,
            job_id=self.job_id,
            candidate_id=self.candidate_id,
            answers=tuple(answer.to_domain() for answer in self.answers),
            score=self.score,
            total=self.total,
            submission_time=self.submission_time,
            duration_seconds=self.duration_seconds,
        )


class UserRecord(_Record):
    id: str
    email: str
    role: UserRole
    password_hash: str | None = None

    @classmethod
    def from_domain(cls, user: User) -> "UserRecord":
        return cls(id=user.id, email=user.email, role=user.role, password_hash=user.password_hash)

    def to_domain(self) -> User:
        return User(id=self.id, email=self.email, role=self.role, password_hash=self.password_hash)
