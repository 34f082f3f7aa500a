"""Editable job definition used while an employer builds a contest."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
import logging
from uuid import uuid4

from contest_app.constants.contest_constants import (
    DEFAULT_MCQ_OPTION_COUNT,
    DEFAULT_TRIAL_POINTS,
    MAX_TRIALS_PER_JOB,
    MIN_MCQ_OPTIONS,
)
from contest_app.core.errors import NotFoundError, ValidationError
from contest_app.core.models import (
    CodingExerciseTrial,
    DeliverableTrial,
    Job,
    MCQTrial,
    TextResponseTrial,
    Trial,
    TrialType,
    trial_display_text,
)
from contest_app.core.trial_rules import validate_job
from contest_app.integrations.suggestions import MCQSuggestion, PromptSuggestion, TrialSuggestion

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SuggestionTicket:
    """Identifies the trial state a suggestion was requested for."""

    trial_id: str
    trial_type: TrialType
    revision: int


class JobDraft:
    """Holds a job under construction and keeps every trial consistent while it is edited."""

    def __init__(self, employer_id: str) -> None:
        self.employer_id = employer_id
        self.title: str = ""
        self.company_name: str = ""
        self.description: str = ""
        self.start_date: datetime | None = None
        self.end_date: datetime | None = None
        self.contest_duration_minutes: int = 0
        self._trials: list[Trial] = []
        self._revisions: dict[str, int] = {}

    def get_trials(self) -> list[Trial]:
        return list(self._trials)

    def get_trial_count(self) -> int:
        return len(self._trials)

    def can_add_trial(self) -> bool:
        return len(self._trials) < MAX_TRIALS_PER_JOB

    def add_trial(self, trial_type: TrialType) -> Trial:
        if not self.can_add_trial():
            raise ValidationError(f"A job can hold at most {MAX_TRIALS_PER_JOB} trials.")
        trial_id = f"trial-{uuid4().hex}"
        trial: Trial
        if trial_type is TrialType.MCQ:
            trial = MCQTrial(
                id=trial_id,
                points=DEFAULT_TRIAL_POINTS,
                question_text="",
                options=("",) * DEFAULT_MCQ_OPTION_COUNT,
                correct_answer_index=0,
            )
        elif trial_type is TrialType.TEXT_RESPONSE:
            trial = TextResponseTrial(id=trial_id, points=DEFAULT_TRIAL_POINTS, prompt="")
        elif trial_type is TrialType.CODING_EXERCISE:
            trial = CodingExerciseTrial(id=trial_id, points=DEFAULT_TRIAL_POINTS, prompt="")
        elif trial_type is TrialType.DELIVERABLE:
            trial = DeliverableTrial(id=trial_id, points=DEFAULT_TRIAL_POINTS, prompt="")
        else:
            raise ValidationError(f"Unknown trial type: {trial_type!r}")
        self._trials.append(trial)
        self._revisions[trial.id] = 0
        return trial

    def remove_trial(self, trial_id: str) -> None:
        index = next((i for i, t in enumerate(self._trials) if t.id == trial_id), -1)
        if index < 0:
            raise NotFoundError(f"Trial {trial_id} not found.")
        self._trials.pop(index)
        self._revisions.pop(trial_id, None)

    def update_trial_text(self, index: int, text: str) -> None:
        trial = self._trial_at(index)
        if trial.type is TrialType.MCQ:
            self._put(index, replace(trial, question_text=text))
        else:
            self._put(index, replace(trial, prompt=text))

    def set_points(self, index: int, points: int) -> None:
        trial = self._trial_at(index)
        if isinstance(points, bool) or not isinstance(points, int) or points < 0:
            raise ValidationError("Points must be a non-negative integer.")
        self._put(index, replace(trial, points=points))

    def set_option_text(self, index: int, option_index: int, text: str) -> None:
        trial = self._mcq_at(index)
        if not 0 <= option_index < len(trial.options):
            raise IndexError(f"Option index {option_index} out of range")
        options = list(trial.options)
        options[option_index] = text
        self._put(index, replace(trial, options=tuple(options)))

    def resize_options(self, index: int, count: int) -> None:
        """Grow or shrink the option list, keeping the correct answer pointed at a real option."""
        trial = self._mcq_at(index)
        if count < MIN_MCQ_OPTIONS:
            raise ValidationError(f"Multiple-choice trials need at least {MIN_MCQ_OPTIONS} options.")
        options = trial.options[:count] + ("",) * (count - len(trial.options))
        self._put(
            index,
            replace(trial, options=options, correct_answer_index=min(trial.correct_answer_index, count - 1)),
        )

    def set_correct_answer(self, index: int, option_index: int) -> None:
        trial = self._mcq_at(index)
        if not 0 <= option_index < len(trial.options):
            raise ValidationError("Correct answer index must point at one of the options.")
        self._put(index, replace(trial, correct_answer_index=option_index))

    def existing_prompts(self, trial_type: TrialType) -> list[str]:
        """Non-empty texts of the trials of one variant, used to avoid repeated suggestions."""
        return [
            trial_display_text(trial)
            for trial in self._trials
            if trial.type is trial_type and trial_display_text(trial).strip()
        ]

    def begin_suggestion(self, index: int) -> SuggestionTicket:
        trial = self._trial_at(index)
        return SuggestionTicket(
            trial_id=trial.id,
            trial_type=trial.type,
            revision=self._revisions[trial.id],
        )

    def apply_suggestion(self, ticket: SuggestionTicket, suggestion: TrialSuggestion) -> bool:
        """Merge a suggestion into its trial. Stale or mismatched suggestions are discarded."""
        index = next((i for i, t in enumerate(self._trials) if t.id == ticket.trial_id), -1)
        if index < 0 or self._revisions.get(ticket.trial_id) != ticket.revision:
            logger.warning("Discarding stale suggestion for trial %s", ticket.trial_id)
            return False
        trial = self._trials[index]
        if trial.type is TrialType.MCQ:
            if not isinstance(suggestion, MCQSuggestion):
                logger.warning("Discarding non multiple-choice suggestion for trial %s", trial.id)
                return False
            self._put(
                index,
                replace(
                    trial,
                    question_text=suggestion.question_text,
                    options=tuple(suggestion.options),
                    correct_answer_index=suggestion.correct_answer_index,
                ),
            )
        else:
            if not isinstance(suggestion, PromptSuggestion):
                logger.warning("Discarding multiple-choice suggestion for trial %s", trial.id)
                return False
            self._put(index, replace(trial, prompt=suggestion.prompt))
        return True

    def build(self, job_id: str | None = None) -> Job:
        """Validate the draft and freeze it into a job."""
        if self.start_date is None or self.end_date is None:
            raise ValidationError("Start and end dates are required.")
        job = Job(
            id=job_id or f"job-{uuid4().hex}",
            employer_id=self.employer_id,
            title=self.title,
            company_name=self.company_name,
            description=self.description,
            trials=tuple(_copy_trial(trial) for trial in self._trials),
            start_date=self.start_date,
            end_date=self.end_date,
            contest_duration_minutes=self.contest_duration_minutes,
        )
        validate_job(job)
        return job

    def _trial_at(self, index: int) -> Trial:
        if not 0 <= index < len(self._trials):
            raise IndexError(f"Trial index {index} out of range")
        return self._trials[index]

    def _mcq_at(self, index: int) -> MCQTrial:
        trial = self._trial_at(index)
        if trial.type is not TrialType.MCQ:
            raise ValidationError("Options only exist on multiple-choice trials.")
        return trial

    def _put(self, index: int, trial: Trial) -> None:
        self._trials[index] = trial
        self._revisions[trial.id] = self._revisions.get(trial.id, 0) + 1


def _copy_trial(trial: Trial) -> Trial:
    if trial.type is TrialType.MCQ:
        return MCQTrial(
            id=trial.id,
            points=trial.points,
            question_text=trial.question_text.strip(),
            options=tuple(option.strip() for option in trial.options),
            correct_answer_index=trial.correct_answer_index,
        )
    if trial.type is TrialType.TEXT_RESPONSE:
        return TextResponseTrial(id=trial.id, points=trial.points, prompt=trial.prompt.strip())
    if trial.type is TrialType.CODING_EXERCISE:
        return CodingExerciseTrial(id=trial.id, points=trial.points, prompt=trial.prompt.strip())
    if trial.type is TrialType.DELIVERABLE:
        return DeliverableTrial(id=trial.id, points=trial.points, prompt=trial.prompt.strip())
    raise ValidationError(f"Unknown trial type: {trial.type!r}")
