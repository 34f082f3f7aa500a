"""Validation rules for trials and the answers captured for them."""

from __future__ import annotations

from datetime import datetime

from contest_app.constants.contest_constants import MAX_TRIALS_PER_JOB, MIN_MCQ_OPTIONS
from contest_app.core.availability import ensure_aware
from contest_app.core.errors import ValidationError
from contest_app.core.models import (
    PROMPT_TRIAL_TYPES,
    AnswerValue,
    DeliverableFile,
    Job,
    Trial,
    TrialType,
)


def validate_trial(trial: Trial, require_text: bool = True) -> None:
    """Check a single trial. ``require_text`` is relaxed while a draft is being edited."""
    _validate_points(trial.points)
    if trial.type is TrialType.MCQ:
        if len(trial.options) < MIN_MCQ_OPTIONS:
            raise ValidationError(
                f"Multiple-choice trials need at least {MIN_MCQ_OPTIONS} options."
            )
        if not _is_int(trial.correct_answer_index) or not 0 <= trial.correct_answer_index < len(trial.options):
            raise ValidationError("Correct answer index must point at one of the options.")
        if require_text:
            if not trial.question_text.strip():
                raise ValidationError("Question text must not be empty.")
            if any(not option.strip() for option in trial.options):
                raise ValidationError("Option text cannot be empty.")
    elif trial.type in PROMPT_TRIAL_TYPES:
        if require_text and not trial.prompt.strip():
            raise ValidationError("Trial prompt must not be empty.")
    else:
        raise ValidationError(f"Unknown trial type: {trial.type!r}")


def validate_trials(trials: list[Trial] | tuple[Trial, ...], require_text: bool = True) -> None:
    if len(trials) > MAX_TRIALS_PER_JOB:
        raise ValidationError(f"A job can hold at most {MAX_TRIALS_PER_JOB} trials.")
    seen: set[str] = set()
    for trial in trials:
        if trial.id in seen:
            raise ValidationError(f"Duplicate trial id: {trial.id}")
        seen.add(trial.id)
        validate_trial(trial, require_text=require_text)


def validate_answer_value(trial: Trial, value: AnswerValue) -> None:
    """Check that an answer value has the kind the trial expects."""
    if trial.type is TrialType.MCQ:
        if not _is_int(value):
            raise ValidationError("Multiple-choice answers must be an option index.")
        if not 0 <= value < len(trial.options):
            raise ValidationError("Selected option is out of range.")
    elif trial.type is TrialType.DELIVERABLE:
        if not isinstance(value, DeliverableFile):
            raise ValidationError("Deliverable answers must be an uploaded file.")
        if not value.file_name.strip():
            raise ValidationError("Uploaded file must have a name.")
    elif trial.type in PROMPT_TRIAL_TYPES:
        if not isinstance(value, str):
            raise ValidationError("Text and coding answers must be text.")
    else:
        raise ValidationError(f"Unknown trial type: {trial.type!r}")


def validate_schedule(start_date: datetime | None, end_date: datetime | None) -> None:
    if start_date is None or end_date is None:
        raise ValidationError("Start and end dates are required.")
    if ensure_aware(end_date) <= ensure_aware(start_date):
        raise ValidationError("End date must be after the start date.")


def validate_job(job: Job) -> None:
    """Check everything a job must satisfy before it is stored."""
    if not job.title.strip():
        raise ValidationError("Job title must not be empty.")
    if not job.employer_id:
        raise ValidationError("A job must belong to an employer.")
    if not _is_int(job.contest_duration_minutes):
        raise ValidationError("Contest duration must be a whole number of minutes.")
    validate_schedule(job.start_date, job.end_date)
    validate_trials(job.trials)


def _validate_points(points: int) -> None:
    if not _is_int(points):
        raise ValidationError("Points must be provided as an integer.")
    if points < 0:
        raise ValidationError("Points must not be negative.")


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
