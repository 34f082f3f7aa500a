"""Trial, job and answer validation."""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from conftest import NOW, make_job, make_mcq
from contest_app.core.errors import ValidationError
from contest_app.core.models import DeliverableFile, DeliverableTrial, TextResponseTrial
from contest_app.core.trial_rules import (
    validate_answer_value,
    validate_job,
    validate_schedule,
    validate_trial,
    validate_trials,
)


class TestValidateTrial:
    def test_valid_mcq(self):
        validate_trial(make_mcq())

    def test_correct_index_out_of_range(self):
        with pytest.raises(ValidationError):
            validate_trial(make_mcq(correct=4))

    def test_needs_two_options(self):
        with pytest.raises(ValidationError):
            validate_trial(make_mcq(correct=0, option_count=1))

    def test_negative_points(self):
        with pytest.raises(ValidationError):
            validate_trial(make_mcq(points=-1))

    def test_blank_prompt_allowed_only_in_drafts(self):
        trial = TextResponseTrial(id="t1", points=0, prompt="  ")
        validate_trial(trial, require_text=False)
        with pytest.raises(ValidationError):
            validate_trial(trial)

    def test_blank_option_rejected(self):
        trial = replace(make_mcq(), options=("A", " ", "C", "D"))
        with pytest.raises(ValidationError, match="Option text"):
            validate_trial(trial)


class TestValidateTrials:
    def test_at_most_ten(self):
        trials = [make_mcq(f"q{i}") for i in range(11)]
        with pytest.raises(ValidationError, match="at most 10"):
            validate_trials(trials)
        validate_trials(trials[:10])

    def test_unique_ids(self):
        with pytest.raises(ValidationError, match="Duplicate"):
            validate_trials([make_mcq("q1"), make_mcq("q1")])


class TestValidateJob:
    def test_end_must_be_after_start(self):
        with pytest.raises(ValidationError, match="End date must be after the start date."):
            validate_schedule(NOW, NOW)
        with pytest.raises(ValidationError):
            validate_job(make_job(start=NOW, end=NOW - timedelta(minutes=1)))

    def test_title_required(self):
        with pytest.raises(ValidationError):
            validate_job(replace(make_job(), title=" "))

    def test_valid_job(self):
        validate_job(make_job(duration_minutes=30))


class TestValidateAnswerValue:
    def test_mcq_requires_index_in_range(self):
        trial = make_mcq()
        validate_answer_value(trial, 3)
        for bad in (4, -1, "1", True):
            with pytest.raises(ValidationError):
                validate_answer_value(trial, bad)

    def test_text_requires_string(self):
        trial = TextResponseTrial(id="t1", points=1, prompt="Why?")
        validate_answer_value(trial, "Because")
        with pytest.raises(ValidationError):
            validate_answer_value(trial, 1)

    def test_deliverable_requires_named_file(self):
        trial = DeliverableTrial(id="d1", points=1, prompt="Upload")
        validate_answer_value(trial, DeliverableFile(file_name="plan.pdf", payload=b"data"))
        with pytest.raises(ValidationError):
            validate_answer_value(trial, "plan.pdf")
        with pytest.raises(ValidationError):
            validate_answer_value(trial, DeliverableFile(file_name="", payload=b"data"))
