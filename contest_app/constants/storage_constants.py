"""Storage configuration constants for the contest application."""

DATA_DIR_ENV_VAR: str = "CONTEST_DATA_DIR"
DEFAULT_DATA_DIR: str = "data"
USERS_FILE_NAME: str = "users.json"
JOBS_FILE_NAME: str = "jobs.json"
SUBMISSIONS_FILE_NAME: str = "submissions.json"
MAX_PASSWORD_BYTES: int = 72
