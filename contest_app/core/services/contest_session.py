"""Service for managing one candidate's attempt at a job contest."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum
import logging
import math
from threading import Lock
from uuid import uuid4

from contest_app.core.models import Answer, AnswerValue, Job, Submission
from contest_app.core.scoring import score_answers

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
FinalizedCallback = Callable[["ContestSession", Submission], None]


class SessionState(str, Enum):
    IN_PROGRESS = "in_progress"
    FINALIZED = "finalized"


class FinalizationTrigger(str, Enum):
    MANUAL = "manual"
    COUNTDOWN = "countdown"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ContestSession:
    """Collects answers while an optional countdown runs, then finalizes exactly once.

    Creating the session starts the attempt. Whether the candidate may start
    (availability window, earlier submissions) is decided by the caller.
    """

    def __init__(
        self,
        job: Job,
        candidate_id: str,
        clock: Clock | None = None,
        on_finalized: FinalizedCallback | None = None,
    ) -> None:
        self._lock = Lock()
        self._job = job
        self._candidate_id = candidate_id
        self._clock: Clock = clock or utc_now
        self._on_finalized = on_finalized

        self.id: str = uuid4().hex
        self._started_at: datetime = self._clock()
        self._remaining_seconds: int | None = job.time_limit_seconds
        self._answers: dict[str, Answer] = {}
        self._state = SessionState.IN_PROGRESS
        self._submission: Submission | None = None
        self._finalized_by: FinalizationTrigger | None = None

    @property
    def job(self) -> Job:
        return self._job

    @property
    def candidate_id(self) -> str:
        return self._candidate_id

    @property
    def started_at(self) -> datetime:
        return self._started_at

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    def is_finalized(self) -> bool:
        return self.state is SessionState.FINALIZED

    def is_timed(self) -> bool:
        return self._remaining_seconds is not None

    @property
    def submission(self) -> Submission | None:
        with self._lock:
            return self._submission

    @property
    def finalized_by(self) -> FinalizationTrigger | None:
        with self._lock:
            return self._finalized_by

    @property
    def remaining_seconds(self) -> int | None:
        """Seconds left on the countdown, ``None`` for untimed sessions."""
        with self._lock:
            return self._remaining_seconds

    def format_remaining(self) -> str:
        remaining = self.remaining_seconds
        if remaining is None:
            return ""
        minutes, seconds = divmod(max(0, remaining), 60)
        return f"{minutes}:{seconds:02d}"

    def record_answer(self, trial_id: str, value: AnswerValue) -> bool:
        """Store an answer, replacing any earlier one. Returns False once finalized."""
        with self._lock:
            if self._state is not SessionState.IN_PROGRESS:
                return False
            self._answers[trial_id] = Answer(trial_id=trial_id, value=value)
            return True

    def clear_answer(self, trial_id: str) -> bool:
        with self._lock:
            if self._state is not SessionState.IN_PROGRESS:
                return False
            return self._answers.pop(trial_id, None) is not None

    def get_answers(self) -> list[Answer]:
        with self._lock:
            return list(self._answers.values())

    def get_answer(self, trial_id: str) -> Answer | None:
        with self._lock:
            return self._answers.get(trial_id)

    def finalize(self) -> Submission | None:
        """Submit the attempt. Only the first call has an effect; later calls return None."""
        return self._finalize(FinalizationTrigger.MANUAL)

    def tick(self) -> bool:
        """Advance the countdown by one second. Returns True if this tick finalized the session."""
        with self._lock:
            if self._state is not SessionState.IN_PROGRESS or self._remaining_seconds is None:
                return False
            self._remaining_seconds = max(0, self._remaining_seconds - 1)
            remaining = self._remaining_seconds
        logger.debug("Session %s tick, %s seconds left", self.id, remaining)
        if remaining > 0:
            return False
        return self._finalize(FinalizationTrigger.COUNTDOWN) is not None

    def _finalize(self, trigger: FinalizationTrigger) -> Submission | None:
        with self._lock:
            if self._state is not SessionState.IN_PROGRESS:
                logger.debug("Ignoring %s finalization of session %s", trigger.value, self.id)
                return None
            self._state = SessionState.FINALIZED
            finished_at = self._clock()
            answers = tuple(self._answers.values())
            result = score_answers(self._job.trials, answers)
            elapsed = (finished_at - self._started_at).total_seconds()
            submission = Submission(
                id=uuid4().hex,
                job_id=self._job.id,
                candidate_id=self._candidate_id,
                answers=answers,
                score=result.score,
                total=result.total,
                submission_time=finished_at,
                duration_seconds=max(0, math.floor(elapsed)),
            )
            self._submission = submission
            self._finalized_by = trigger

        logger.info(
            "Session %s for job %s finalized (%s): %s/%s in %ss",
            self.id,
            self._job.id,
            trigger.value,
            submission.score,
            submission.total,
            submission.duration_seconds,
        )
        if self._on_finalized is not None:
            self._on_finalized(self, submission)
        return submission
