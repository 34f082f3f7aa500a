"""Business logic for running job contests, shared by every surface of the application."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from threading import Lock

from contest_app.constants.contest_constants import COUNTDOWN_TICK_SECONDS, UNKNOWN_CANDIDATE_LABEL
from contest_app.core.availability import JobListing, build_candidate_listings, is_job_available
from contest_app.core.errors import (
    ContestUnavailableError,
    DuplicateSubmissionError,
    NotFoundError,
    StorageError,
    SuggestionUnavailableError,
    ValidationError,
)
from contest_app.core.job_draft import JobDraft
from contest_app.core.models import Answer, AnswerValue, Job, Submission, Trial, TrialType
from contest_app.core.scoring import is_answer_correct
from contest_app.core.services.contest_session import Clock, ContestSession, utc_now
from contest_app.core.services.countdown import CountdownTimer
from contest_app.core.services.job_repository import JobRepository
from contest_app.core.services.leaderboard import LeaderboardRow, rank_submissions
from contest_app.core.services.submission_repository import SubmissionRepository
from contest_app.core.services.user_repository import UserRepository
from contest_app.core.trial_rules import validate_answer_value
from contest_app.integrations.suggestions import QuestionSuggester

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class JobSummary:
    job: Job
    submission_count: int


@dataclass(frozen=True, slots=True)
class TrialReview:
    """One trial of a submission as an employer reviews it."""

    trial: Trial
    answer: Answer | None
    is_correct: bool | None


@dataclass(frozen=True, slots=True)
class SubmissionReview:
    submission: Submission
    job: Job
    candidate_email: str
    trials: tuple[TrialReview, ...]


@dataclass(slots=True)
class _ActiveContest:
    session: ContestSession
    timer: CountdownTimer
    pending: Submission | None = None


class ContestManager:
    """Facade over the repositories, contest sessions, scoring and question suggestions."""

    def __init__(
        self,
        jobs: JobRepository,
        submissions: SubmissionRepository,
        users: UserRepository,
        suggester: QuestionSuggester | None = None,
        clock: Clock | None = None,
        tick_interval_seconds: float = COUNTDOWN_TICK_SECONDS,
    ) -> None:
        self._lock = Lock()
        self._jobs = jobs
        self._submissions = submissions
        self._users = users
        self._suggester = suggester
        self._clock: Clock = clock or utc_now
        self._tick_interval = tick_interval_seconds
        self._active: dict[tuple[str, str], _ActiveContest] = {}

    # --- Employer side ---

    def create_job(self, draft: JobDraft) -> Job:
        job = draft.build()
        with self._lock:
            stored = self._jobs.add_job(job)
        logger.info("Employer %s created job %s with %d trials", stored.employer_id, stored.id, len(stored.trials))
        return stored

    def get_job(self, job_id: str) -> Job:
        with self._lock:
            return self._jobs.get_job(job_id)

    def list_jobs(self) -> list[Job]:
        with self._lock:
            return self._jobs.list_jobs()

    def list_employer_jobs(self, employer_id: str) -> list[JobSummary]:
        with self._lock:
            return [
                JobSummary(job=job, submission_count=self._submissions.count_for_job(job.id))
                for job in self._jobs.list_jobs_for_employer(employer_id)
            ]

    def get_leaderboard(self, job_id: str) -> list[LeaderboardRow]:
        with self._lock:
            self._jobs.get_job(job_id)
            return rank_submissions(
                self._submissions.list_for_job(job_id),
                self._users.get_email_map(),
            )

    def get_submission_reviews(self, job_id: str) -> list[SubmissionReview]:
        with self._lock:
            job = self._jobs.get_job(job_id)
            emails = self._users.get_email_map()
            return [
                _build_review(submission, job, emails.get(submission.candidate_id, UNKNOWN_CANDIDATE_LABEL))
                for submission in self._submissions.list_for_job(job_id)
            ]

    async def suggest_trial(self, draft: JobDraft, index: int) -> bool:
        """Fill a draft trial from the suggester.

        Returns False when the draft changed while the request was in flight
        and the suggestion was discarded. Raises SuggestionUnavailableError
        on failure, leaving the draft as it was.
        """
        if not draft.title.strip():
            raise ValidationError("Please enter a job title first to get relevant suggestions.")
        if self._suggester is None:
            raise SuggestionUnavailableError()
        ticket = draft.begin_suggestion(index)
        try:
            suggestion = await self._suggester.suggest(
                ticket.trial_type,
                draft.title.strip(),
                draft.existing_prompts(ticket.trial_type),
            )
        except Exception as exc:
            logger.exception("Suggester failed for %s trial %s", ticket.trial_type.value, ticket.trial_id)
            raise SuggestionUnavailableError() from exc
        if suggestion is None:
            logger.warning("No suggestion available for %s trial %s", ticket.trial_type.value, ticket.trial_id)
            raise SuggestionUnavailableError()
        return draft.apply_suggestion(ticket, suggestion)

    # --- Candidate side ---

    def list_candidate_jobs(self, candidate_id: str, now: datetime | None = None) -> list[JobListing]:
        moment = now or self._clock()
        with self._lock:
            return build_candidate_listings(
                self._jobs.list_jobs(),
                self._submissions.list_for_candidate(candidate_id),
                candidate_id,
                moment,
            )

    def list_candidate_results(self, candidate_id: str) -> list[SubmissionReview]:
        """Past submissions of a candidate. Submissions whose job no longer resolves are skipped."""
        with self._lock:
            emails = self._users.get_email_map()
            reviews: list[SubmissionReview] = []
            for submission in self._submissions.list_for_candidate(candidate_id):
                job = self._jobs.find_job(submission.job_id)
                if job is None:
                    logger.warning("Skipping submission %s for unknown job %s", submission.id, submission.job_id)
                    continue
                email = emails.get(candidate_id, UNKNOWN_CANDIDATE_LABEL)
                reviews.append(_build_review(submission, job, email))
            return reviews

    def start_contest(self, job_id: str, candidate_id: str, start_countdown: bool = True) -> ContestSession:
        with self._lock:
            job = self._jobs.get_job(job_id)
            if not is_job_available(job, self._clock()):
                raise ContestUnavailableError("This contest is not open right now.")
            if self._submissions.has_submission(candidate_id, job_id):
                raise DuplicateSubmissionError("You have already completed this contest.")
            key = (candidate_id, job_id)
            if key in self._active:
                raise DuplicateSubmissionError("This contest is already in progress.")
            session = ContestSession(
                job,
                candidate_id,
                clock=self._clock,
                on_finalized=self._handle_finalized,
            )
            timer = CountdownTimer(session, self._tick_interval)
            self._active[key] = _ActiveContest(session=session, timer=timer)

        if start_countdown:
            timer.start()
        logger.info(
            "Candidate %s started job %s (%s)",
            candidate_id,
            job_id,
            f"{job.contest_duration_minutes} minute limit" if job.is_timed else "untimed",
        )
        return session

    def get_active_session(self, candidate_id: str, job_id: str) -> ContestSession | None:
        with self._lock:
            active = self._active.get((candidate_id, job_id))
            return active.session if active else None

    def get_active_session_count(self) -> int:
        with self._lock:
            return len(self._active)

    def record_answer(self, session: ContestSession, trial_id: str, value: AnswerValue | None) -> bool:
        """Validate and store an answer. A deliverable without a file records nothing."""
        trial = session.job.get_trial(trial_id)
        if trial is None:
            raise NotFoundError(f"Trial {trial_id} not found in job {session.job.id}.")
        if value is None:
            if trial.type is TrialType.DELIVERABLE:
                session.clear_answer(trial_id)
                return False
            raise ValidationError("An answer is required.")
        validate_answer_value(trial, value)
        return session.record_answer(trial_id, value)

    def submit(self, session: ContestSession) -> Submission | None:
        """Manual submit. Returns None when the session was already finalized.

        A submission that could not be written stays pending on the manager
        and can be written later with retry_pending_submission.
        """
        return session.finalize()

    def get_pending_submission(self, session: ContestSession) -> Submission | None:
        with self._lock:
            active = self._active.get((session.candidate_id, session.job.id))
            if active is None or active.session is not session:
                return None
            return active.pending

    def retry_pending_submission(self, session: ContestSession) -> Submission | None:
        """Write a finalized submission whose first write failed.

        Returns None when nothing is pending. Raises StorageError if the
        write fails again, keeping the submission pending.
        """
        key = (session.candidate_id, session.job.id)
        with self._lock:
            active = self._active.get(key)
            if active is None or active.session is not session or active.pending is None:
                return None
            submission = self._submissions.add_submission(active.pending)
            del self._active[key]
        logger.info("Stored pending submission %s on retry", submission.id)
        return submission

    def abandon_contest(self, session: ContestSession) -> None:
        """Drop an unfinished attempt without leaving any record."""
        with self._lock:
            key = (session.candidate_id, session.job.id)
            active = self._active.get(key)
            if active is None or active.session is not session:
                return
            if active.pending is not None:
                logger.warning("Not abandoning session %s with a pending submission", session.id)
                return
            del self._active[key]
        active.timer.stop()
        logger.info("Candidate %s abandoned job %s", session.candidate_id, session.job.id)

    def shutdown(self) -> None:
        with self._lock:
            timers = [active.timer for active in self._active.values()]
            pending = sum(1 for active in self._active.values() if active.pending is not None)
        for timer in timers:
            timer.stop()
        if pending:
            logger.warning("Shutting down with %d unsaved submissions", pending)

    def _handle_finalized(self, session: ContestSession, submission: Submission) -> None:
        key = (session.candidate_id, session.job.id)
        with self._lock:
            active = self._active.get(key)
            if active is None or active.session is not session:
                logger.warning("Ignoring submission %s from an abandoned session", submission.id)
                return
            try:
                self._submissions.add_submission(submission)
            except StorageError:
                logger.exception("Could not store submission %s; keeping it pending", submission.id)
                active.pending = submission
            else:
                del self._active[key]
        active.timer.stop()


def _build_review(submission: Submission, job: Job, candidate_email: str) -> SubmissionReview:
    trials = tuple(
        TrialReview(
            trial=trial,
            answer=submission.answer_for(trial.id),
            is_correct=is_answer_correct(trial, submission.answer_for(trial.id)),
        )
        for trial in job.trials
    )
    return SubmissionReview(submission=submission, job=job, candidate_email=candidate_email, trials=trials)
