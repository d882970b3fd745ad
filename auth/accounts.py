"""
auth/accounts.py -- Account creation: self-service signup and managed CreateUser.

Two entry points write credentials:

  signup()       public; enforces the password strength policy, checks
                 username then email for collisions, and logs the new user
                 straight in (returns the same token pair as login).

  create_user()  called from the protected /users endpoint; additionally
                 validates the email shape and requires a reminder value,
                 and does not authenticate anybody.

update_user() applies the same profile rules when an existing account is
edited through PATCH /users.

Both check uniqueness before writing, but that is a fast path for a friendly
message only. The store's UNIQUE constraints are the real guarantee, and the
store raises the same ConflictError when a concurrent request wins the race.

Layer rule: no imports from api/, foods/, or mail/.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from email_validator import EmailNotValidError, validate_email

from auth.errors import ConflictError, NotFoundError, ValidationError
from auth.models import Credential
from auth.passwords import MAX_PASSWORD_BYTES, hash_password
from auth.policy import check_password_strength

if TYPE_CHECKING:
    from core.config import Settings
    from auth.sessions import IssuedSession, SessionManager
    from auth.store import UserStore

logger = logging.getLogger("simpan.auth")


class AccountProvisioner:
    def __init__(self, settings: Settings, store: UserStore, sessions: SessionManager) -> None:
        self._settings = settings
        self._store = store
        self._sessions = sessions

    def signup(self, username: str, password: str, name: str, email: str) -> IssuedSession:
        """Create an account and return a fresh session for it.

        Raises ValidationError for missing fields or a weak password and
        ConflictError naming the field when the username or email is taken.
        Nothing is written unless every check passes.
        """
        if not username or not password or not name or not email:
            raise ValidationError("All fields are required")

        check_password_strength(password)

        if self._store.get_by_username(username) is not None:
            raise ConflictError("Username already exists", field="username")
        if self._store.get_by_email(email) is not None:
            raise ConflictError("Email already exists", field="email")

        credential = self._store.create_user(
            Credential(
                username=username,
                email=email,
                name=name,
                hashed_password=hash_password(password, rounds=self._settings.bcrypt_rounds),
            )
        )
        logger.info("Signup created user_id=%s", credential.id)
        return self._sessions.issue(credential)

    def create_user(self, username: str, email: str, password: str, name: str, reminder: str) -> Credential:
        """Create an account without logging it in. Returns the stored credential."""
        username, email, name, reminder = _clean_profile(username, email, name, reminder)
        password = password.strip()
        if not password:
            raise ValidationError("Password is required")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes long.",
                code="password_too_long",
            )

        if self._store.get_by_username(username) is not None:
            raise ConflictError("Duplicate username", field="username")

        credential = self._store.create_user(
            Credential(
                username=username,
                email=email,
                name=name,
                reminder=reminder,
                hashed_password=hash_password(password, rounds=self._settings.bcrypt_rounds),
            )
        )
        logger.info("Created user_id=%s", credential.id)
        return credential

    def update_user(self, user_id: int, username: str, email: str, name: str, reminder: str) -> Credential:
        """Replace the profile fields of an existing account.

        Raises NotFoundError for an unknown id and ConflictError when the new
        username belongs to someone else. The password is not touched.
        """
        username, email, name, reminder = _clean_profile(username, email, name, reminder)

        if self._store.get_by_id(user_id) is None:
            raise NotFoundError("User not found")
        duplicate = self._store.get_by_username(username)
        if duplicate is not None and duplicate.id != user_id:
            raise ConflictError("Duplicate username", field="username")

        updated = self._store.update_user(user_id, username=username, email=email, name=name, reminder=reminder)
        if updated is None:
            # Deleted between the existence check and the write.
            raise NotFoundError("User not found")
        return updated


def _clean_profile(username: str, email: str, name: str, reminder: str) -> tuple[str, str, str, str]:
    """Trim the profile fields and reject empty ones or a malformed email."""
    username, email, name, reminder = (v.strip() for v in (username, email, name, reminder))
    if not username:
        raise ValidationError("Username is required")
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValidationError("Invalid email address") from exc
    if not name:
        raise ValidationError("Name is required")
    if not reminder:
        raise ValidationError("Reminder is required")
    return username, email, name, reminder
