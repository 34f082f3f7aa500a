"""Deterministic auto-grading of a finished attempt."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from contest_app.core.models import AUTO_GRADED_TRIAL_TYPES, Answer, MCQTrial, Trial, TrialType


@dataclass(frozen=True, slots=True)
class ScoreResult:
    score: int
    total: int


def score_answers(
    trials: Iterable[Trial],
    answers: Iterable[Answer] | Mapping[str, Answer],
) -> ScoreResult:
    """Return the auto-graded score and the maximum attainable score.

    Only multiple-choice trials count towards either number. A trial
    without an answer, or with a wrong one, contributes nothing.
    """
    answers_by_trial = _index_answers(answers)
    score = 0
    total = 0
    for trial in trials:
        if trial.type not in AUTO_GRADED_TRIAL_TYPES:
            continue
        total += trial.points
        if is_answer_correct(trial, answers_by_trial.get(trial.id)):
            score += trial.points
    return ScoreResult(score=score, total=total)


def is_answer_correct(trial: Trial, answer: Answer | None) -> bool | None:
    """Exact-match check for auto-graded trials; ``None`` for trials reviewed by hand."""
    if trial.type is not TrialType.MCQ:
        return None
    if answer is None:
        return False
    return _matches_correct_index(trial, answer.value)


def _matches_correct_index(trial: MCQTrial, value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return value == trial.correct_answer_index


def _index_answers(answers: Iterable[Answer] | Mapping[str, Answer]) -> dict[str, Answer]:
    if isinstance(answers, Mapping):
        return dict(answers)
    return {answer.trial_id: answer for answer in answers}
