"""Sign-up, log-in and password hashing."""

from __future__ import annotations

import pytest

from contest_app.core.errors import AuthenticationError, ValidationError
from contest_app.core.models import UserRole
from contest_app.core.services.accounts import AccountService, hash_password, verify_password
from contest_app.core.services.user_repository import UserRepository


@pytest.fixture
def accounts():
    return AccountService(UserRepository())


def test_sign_up_then_log_in(accounts):
    user = accounts.sign_up("hr@acme.example", "s3cret", UserRole.EMPLOYER)
    assert user.password_hash != "s3cret"
    assert accounts.log_in("hr@acme.example", "s3cret") == user


def test_duplicate_email_rejected(accounts):
    accounts.sign_up("ada@example.com", "pw", UserRole.CANDIDATE)
    with pytest.raises(ValidationError, match="An account with this email already exists."):
        accounts.sign_up("ada@example.com", "other", UserRole.EMPLOYER)


@pytest.mark.parametrize("email, password", [("ada@example.com", "wrong"), ("nobody@example.com", "pw")])
def test_failed_log_in_is_generic(accounts, email, password):
    accounts.sign_up("ada@example.com", "pw", UserRole.CANDIDATE)
    with pytest.raises(AuthenticationError) as exc_info:
        accounts.log_in(email, password)
    assert str(exc_info.value) == "Invalid email or password."


def test_anonymous_users_are_not_stored():
    users = UserRepository()
    anonymous = AccountService(users).log_in_anonymously(UserRole.CANDIDATE)
    assert anonymous.email == "anonymous-candidate"
    assert anonymous.id.startswith("anonymous-candidate-")
    assert users.list_users() == []


def test_anonymous_user_cannot_log_in_with_password(accounts):
    with pytest.raises(AuthenticationError):
        accounts.log_in("anonymous-candidate", "")


def test_password_hash_round_trip():
    encoded = hash_password("pw")
    assert encoded.startswith("$2b$")
    assert encoded != hash_password("pw")
    assert verify_password("pw", encoded)
    assert not verify_password("pW", encoded)
    assert not verify_password("pw", "garbage")


def test_overlong_password_rejected(accounts):
    with pytest.raises(ValidationError, match="at most 72 bytes"):
        accounts.sign_up("ada@example.com", "x" * 73, UserRole.CANDIDATE)
    assert not verify_password("x" * 73, hash_password("x" * 72))
