"""Contest editor: trial limits, option resizing and suggestion merging."""

from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import NOW
from contest_app.core.errors import NotFoundError, ValidationError
from contest_app.core.job_draft import JobDraft
from contest_app.core.models import TrialType
from contest_app.integrations.suggestions import MCQSuggestion, PromptSuggestion


def _ready_draft() -> JobDraft:
    draft = JobDraft(employer_id="employer-1")
    draft.title = "Data Analyst"
    draft.company_name = "Acme"
    draft.description = "Crunch numbers."
    draft.start_date = NOW - timedelta(days=1)
    draft.end_date = NOW + timedelta(days=7)
    draft.contest_duration_minutes = 45
    return draft


class TestTrials:
    def test_new_mcq_defaults(self):
        draft = _ready_draft()
        trial = draft.add_trial(TrialType.MCQ)
        assert trial.points == 10
        assert trial.options == ("", "", "", "")
        assert trial.correct_answer_index == 0

    def test_eleventh_trial_rejected(self):
        draft = _ready_draft()
        for _ in range(10):
            draft.add_trial(TrialType.TEXT_RESPONSE)
        assert not draft.can_add_trial()
        with pytest.raises(ValidationError):
            draft.add_trial(TrialType.MCQ)
        assert draft.get_trial_count() == 10

    def test_remove_trial(self):
        draft = _ready_draft()
        trial = draft.add_trial(TrialType.CODING_EXERCISE)
        draft.remove_trial(trial.id)
        assert draft.get_trials() == []
        with pytest.raises(NotFoundError):
            draft.remove_trial(trial.id)

    def test_shrinking_options_clamps_correct_index(self):
        draft = _ready_draft()
        draft.add_trial(TrialType.MCQ)
        draft.set_correct_answer(0, 3)
        draft.resize_options(0, 3)
        trial = draft.get_trials()[0]
        assert len(trial.options) == 3
        assert trial.correct_answer_index == 2

    def test_growing_options_keeps_correct_index(self):
        draft = _ready_draft()
        draft.add_trial(TrialType.MCQ)
        draft.set_correct_answer(0, 1)
        draft.resize_options(0, 6)
        trial = draft.get_trials()[0]
        assert trial.options == ("",) * 6
        assert trial.correct_answer_index == 1

    def test_cannot_go_below_two_options(self):
        draft = _ready_draft()
        draft.add_trial(TrialType.MCQ)
        with pytest.raises(ValidationError):
            draft.resize_options(0, 1)

    def test_options_only_on_mcq(self):
        draft = _ready_draft()
        draft.add_trial(TrialType.DELIVERABLE)
        with pytest.raises(ValidationError):
            draft.set_option_text(0, 0, "A")

    def test_points_must_be_non_negative_int(self):
        draft = _ready_draft()
        draft.add_trial(TrialType.MCQ)
        with pytest.raises(ValidationError):
            draft.set_points(0, -5)
        draft.set_points(0, 0)
        assert draft.get_trials()[0].points == 0

    def test_existing_prompts_filters_by_type_and_blank(self):
        draft = _ready_draft()
        draft.add_trial(TrialType.TEXT_RESPONSE)
        draft.add_trial(TrialType.TEXT_RESPONSE)
        draft.add_trial(TrialType.CODING_EXERCISE)
        draft.update_trial_text(0, "Describe a project.")
        draft.update_trial_text(2, "FizzBuzz")
        assert draft.existing_prompts(TrialType.TEXT_RESPONSE) == ["Describe a project."]
        assert draft.existing_prompts(TrialType.CODING_EXERCISE) == ["FizzBuzz"]


class TestBuild:
    def test_build_produces_immutable_job(self):
        draft = _ready_draft()
        draft.add_trial(TrialType.MCQ)
        draft.update_trial_text(0, "  2 + 2?  ")
        for option_index, text in enumerate(["3", "4", "5", "22"]):
            draft.set_option_text(0, option_index, text)
        draft.set_correct_answer(0, 1)

        job = draft.build(job_id="job-42")

        assert job.id == "job-42"
        assert job.trials[0].question_text == "2 + 2?"
        assert job.time_limit_seconds == 45 * 60
        draft.set_option_text(0, 0, "changed")
        assert job.trials[0].options[0] == "3"

    def test_end_before_start_rejected(self):
        draft = _ready_draft()
        draft.end_date = draft.start_date
        with pytest.raises(ValidationError, match="End date must be after the start date."):
            draft.build()

    def test_missing_dates_rejected(self):
        draft = _ready_draft()
        draft.start_date = None
        with pytest.raises(ValidationError):
            draft.build()

    def test_incomplete_trial_rejected(self):
        draft = _ready_draft()
        draft.add_trial(TrialType.MCQ)
        with pytest.raises(ValidationError):
            draft.build()


class TestSuggestions:
    def test_apply_mcq_suggestion(self):
        draft = _ready_draft()
        draft.add_trial(TrialType.MCQ)
        ticket = draft.begin_suggestion(0)
        suggestion = MCQSuggestion(question_text="Q?", options=["a", "b", "c", "d"], correct_answer_index=2)

        assert draft.apply_suggestion(ticket, suggestion)

        trial = draft.get_trials()[0]
        assert (trial.question_text, trial.options, trial.correct_answer_index) == ("Q?", ("a", "b", "c", "d"), 2)

    def test_stale_suggestion_is_discarded(self):
        draft = _ready_draft()
        draft.add_trial(TrialType.TEXT_RESPONSE)
        ticket = draft.begin_suggestion(0)
        draft.update_trial_text(0, "Typed while waiting")

        assert draft.apply_suggestion(ticket, PromptSuggestion(prompt="Suggested")) is False
        assert draft.get_trials()[0].prompt == "Typed while waiting"

    def test_suggestion_for_removed_trial_is_discarded(self):
        draft = _ready_draft()
        trial = draft.add_trial(TrialType.DELIVERABLE)
        ticket = draft.begin_suggestion(0)
        draft.remove_trial(trial.id)
        assert draft.apply_suggestion(ticket, PromptSuggestion(prompt="Upload a plan")) is False

    def test_mismatched_suggestion_is_discarded(self):
        draft = _ready_draft()
        draft.add_trial(TrialType.MCQ)
        ticket = draft.begin_suggestion(0)
        assert draft.apply_suggestion(ticket, PromptSuggestion(prompt="Nope")) is False
        assert draft.get_trials()[0].question_text == ""
