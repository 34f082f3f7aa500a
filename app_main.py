"""Application entry point: loads the stored contests and prints their leaderboards."""

from __future__ import annotations

import os
from pathlib import Path
import sys

from contest_app.constants.storage_constants import (
    DATA_DIR_ENV_VAR,
    DEFAULT_DATA_DIR,
    JOBS_FILE_NAME,
    SUBMISSIONS_FILE_NAME,
    USERS_FILE_NAME,
)
from contest_app.constants.suggestion_constants import API_KEY_ENV_VAR
from contest_app.core.contest_manager import ContestManager
from contest_app.core.errors import StorageError
from contest_app.core.services.job_repository import JobRepository
from contest_app.core.services.submission_repository import SubmissionRepository
from contest_app.core.services.user_repository import UserRepository
from contest_app.core.storage.json_store import JsonCollectionStore
from contest_app.core.storage.records import JobRecord, SubmissionRecord, UserRecord
from contest_app.integrations.suggestions import create_suggester
from contest_app.utils.logging_config import configure_logging


def build_contest_manager(data_dir: Path, api_key: str | None = None) -> ContestManager:
    """Wire the file-backed repositories and the suggester into a manager."""
    users = UserRepository(JsonCollectionStore(data_dir / USERS_FILE_NAME, UserRecord))
    jobs = JobRepository(JsonCollectionStore(data_dir / JOBS_FILE_NAME, JobRecord))
    submissions = SubmissionRepository(JsonCollectionStore(data_dir / SUBMISSIONS_FILE_NAME, SubmissionRecord))
    return ContestManager(
        jobs=jobs,
        submissions=submissions,
        users=users,
        suggester=create_suggester(api_key),
    )


def format_report(manager: ContestManager) -> str:
    jobs = manager.list_jobs()
    if not jobs:
        return "No job contests have been created yet."
    lines: list[str] = []
    for job in jobs:
        limit = f"{job.contest_duration_minutes} min" if job.is_timed else "no time limit"
        lines.append(f"{job.title} - {job.company_name} ({limit})")
        lines.append(f"  open {job.start_date.isoformat()} to {job.end_date.isoformat()}")
        rows = manager.get_leaderboard(job.id)
        if not rows:
            lines.append("  no submissions yet")
        for row in rows:
            lines.append(
                f"  {row.rank:>3}. {row.candidate_email:<32} {row.score}/{row.total}"
                f" ({row.percentage:.0f}%) in {row.duration_seconds}s"
            )
    return "\n".join(lines)


def main() -> int:
    """Initialize logging, load the stored collections, and print a report."""
    logger = configure_logging()
    data_dir = Path(os.environ.get(DATA_DIR_ENV_VAR, DEFAULT_DATA_DIR))
    logger.info("Loading contest data from %s", data_dir.resolve())

    try:
        manager = build_contest_manager(data_dir, os.environ.get(API_KEY_ENV_VAR))
    except StorageError as exc:
        logger.error("Could not load contest data: %s", exc)
        return 1

    print(format_report(manager))
    return 0


if __name__ == "__main__":
    sys.exit(main())
