"""Service for storing user accounts."""

from __future__ import annotations

from collections.abc import Iterable

from contest_app.core.errors import NotFoundError, ValidationError
from contest_app.core.models import User
from contest_app.core.storage.json_store import JsonCollectionStore
from contest_app.core.storage.records import UserRecord


class UserRepository:
    def __init__(self, store: JsonCollectionStore[UserRecord] | None = None) -> None:
        self._store = store
        self._users: dict[str, User] = {}
        if store is not None:
            for record in store.load():
                user = record.to_domain()
                self._users[user.id] = user

    def add_user(self, user: User) -> User:
        if not user.email.strip():
            raise ValidationError("Email must not be empty.")
        if self.find_by_email(user.email) is not None:
            raise ValidationError("An account with this email already exists.")
        if user.id in self._users:
            raise ValidationError(f"A user with id {user.id} already exists.")
        updated = {**self._users, user.id: user}
        self._flush(updated.values())
        self._users = updated
        return user

    def get_user(self, user_id: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found.")
        return user

    def find_user(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def find_by_email(self, email: str) -> User | None:
        wanted = _normalize_email(email)
        return next((u for u in self._users.values() if _normalize_email(u.email) == wanted), None)

    def list_users(self) -> list[User]:
        return list(self._users.values())

    def get_email_map(self) -> dict[str, str]:
        return {user.id: user.email for user in self._users.values()}

    def _flush(self, users: Iterable[User]) -> None:
        if self._store is not None:
            self._store.save([UserRecord.from_domain(user) for user in users])


def _normalize_email(email: str) -> str:
    return email.strip().lower()
