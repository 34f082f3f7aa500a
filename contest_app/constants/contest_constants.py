"""Contest-related constants shared across the core layers."""

MAX_TRIALS_PER_JOB: int = 10
DEFAULT_TRIAL_POINTS: int = 10
MIN_MCQ_OPTIONS: int = 2
DEFAULT_MCQ_OPTION_COUNT: int = 4
COUNTDOWN_TICK_SECONDS: float = 1.0
UNKNOWN_CANDIDATE_LABEL: str = "Unknown Candidate"
