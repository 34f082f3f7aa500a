"""Account sign-up and log-in on top of the user repository."""

from __future__ import annotations

import logging
from uuid import uuid4

import bcrypt

from contest_app.constants.storage_constants import MAX_PASSWORD_BYTES
from contest_app.core.errors import AuthenticationError, ValidationError
from contest_app.core.models import User, UserRole
from contest_app.core.services.user_repository import UserRepository

logger = logging.getLogger(__name__)

class AccountService:
    """Registers and authenticates employers and candidates."""

    def __init__(self, users: UserRepository) -> None:
        self._users = users

    def sign_up(self, email: str, password: str, role: UserRole) -> User:
        cleaned_email = email.strip()
        if not cleaned_email:
            raise ValidationError("Email must not be empty.")
        if not password:
            raise ValidationError("Password must not be empty.")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long.")
        if self._users.find_by_email(cleaned_email) is not None:
            raise ValidationError("An account with this email already exists.")
        user = User(
            id=uuid4().hex,
            email=cleaned_email,
            role=role,
            password_hash=hash_password(password),
        )
        self._users.add_user(user)
        logger.info("Registered %s account %s", role.value.lower(), user.id)
        return user

    def log_in(self, email: str, password: str) -> User:
        user = self._users.find_by_email(email)
        if user is None or user.password_hash is None or not verify_password(password, user.password_hash):
            raise AuthenticationError()
        return user

    @staticmethod
    def log_in_anonymously(role: UserRole) -> User:
        """Return a throwaway identity that is never stored."""
        label = role.value.lower()
        return User(id=f"anonymous-{label}-{uuid4().hex}", email=f"anonymous-{label}", role=role)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("ascii")


def verify_password(password: str, hashed: str) -> bool:
    secret = password.encode("utf-8")
    if len(secret) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(secret, hashed.encode("ascii"))
    except ValueError:
        logger.warning("Stored password hash is not a bcrypt hash")
        return False
