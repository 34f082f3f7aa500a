"""Settings for the question-suggestion collaborator."""

SUGGESTION_MODEL: str = "gemini-2.5-flash"
SUGGESTED_MCQ_OPTION_COUNT: int = 4
OFFLINE_SUGGESTION_DELAY_SECONDS: float = 1.0
API_KEY_ENV_VAR: str = "GEMINI_API_KEY"
