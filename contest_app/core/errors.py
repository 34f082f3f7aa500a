"""Exceptions raised by the contest core."""

from __future__ import annotations


class ContestError(Exception):
    """Base class for contest errors that can be shown to the user."""


class ValidationError(ContestError, ValueError):
    """Raised when input is rejected before any state is changed."""


class NotFoundError(ContestError, LookupError):
    """Raised when a referenced job, trial or user does not exist."""


class AuthenticationError(ContestError):
    """Raised when credentials do not match. The message never says which field was wrong."""

    def __init__(self) -> None:
        super().__init__("Invalid email or password.")


class ContestUnavailableError(ContestError):
    """Raised when a contest is started outside its availability window."""


class DuplicateSubmissionError(ContestError):
    """Raised when a candidate already submitted, or is submitting, for a job."""


class SuggestionUnavailableError(ContestError):
    """Raised when the suggestion collaborator could not produce a usable suggestion."""

    def __init__(self, message: str = "Could not generate a suggestion. Please try again.") -> None:
        super().__init__(message)


class StorageError(ContestError):
    """Raised when a persisted collection cannot be read or written."""
