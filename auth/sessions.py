"""
auth/sessions.py -- Login, session renewal and logout.

Dual-token protocol:
  Login issues two tokens. The access token (identity claim, access secret)
  goes back in the response body and is sent by the client as a Bearer
  header. The refresh token (username only, refresh secret) goes into an
  httpOnly cookie and is used for nothing except minting new access tokens.

  Neither token is stored server-side. Renewal re-reads the account so that
  deleting a user stops further renewals, but it never rotates the refresh
  token -- the session lifetime is fixed at login.

  Logout only removes the cookie. A copy of the refresh token taken before
  logout keeps verifying until its natural expiry; there is no revocation
  list.

Per-client state machine:
  Anonymous --login--> Authenticated --renew--> Authenticated --logout--> Anonymous

Layer rule: no imports from api/, foods/, or mail/.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from auth.errors import AuthenticationError, ValidationError
from auth.models import Credential
from auth.passwords import DUMMY_HASH, verify_password
from auth.tokens import AccessClaim, SessionClaim, TokenKeyring

if TYPE_CHECKING:
    from core.config import Settings
    from auth.store import UserStore

logger = logging.getLogger("simpan.auth")


@dataclass(frozen=True)
class IssuedSession:
    """The pair of tokens handed out by login and signup."""

    access_token: str
    session_token: str


class LogoutOutcome(enum.Enum):
    NO_SESSION = "no_session"  # nothing to clear -> 204
    CLEARED = "cleared"  # cookie cleared -> 200


class SessionManager:
    """Issues, renews and ends sessions for credentials held in a UserStore."""

    def __init__(self, settings: Settings, store: UserStore, keyring: TokenKeyring | None = None) -> None:
        self._settings = settings
        self._store = store
        self.keyring = keyring or TokenKeyring(settings)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def login(self, username: str, password: str) -> IssuedSession:
        """Verify username/password and issue an access + refresh token pair.

        Unknown username and wrong password raise the same AuthenticationError
        and both run bcrypt, so neither the response nor its timing reveals
        whether the account exists.
        """
        if not username or not password:
            raise ValidationError("All fields are required")

        credential = self.authenticate(username, password)
        if credential is None:
            logger.info("Login failed for username=%r", username)
            raise AuthenticationError("Invalid username or password.", code="bad_credentials")

        logger.info("Login succeeded for user_id=%s", credential.id)
        return self.issue(credential)

    def renew(self, session_token: str | None) -> str:
        """Mint a fresh access token from a valid refresh token.

        The refresh token itself is returned to nobody and is not rotated.
        """
        if not session_token:
            raise AuthenticationError("Session cookie missing.", code="missing_session")

        claim = self.keyring.verify_session(session_token)
        if claim is None:
            logger.info("Session renewal rejected: invalid or expired refresh token")
            raise AuthenticationError("Session is invalid or has expired.", code="invalid_session", status_code=403)

        credential = self._store.get_by_username(claim.username)
        if credential is None:
            logger.info("Session renewal rejected: account %r no longer exists", claim.username)
            raise AuthenticationError("Account no longer exists.", code="account_not_found")

        return self.keyring.issue_access(_access_claim_for(credential))

    def logout(self, session_token: str | None) -> LogoutOutcome:
        """Report whether there is a session cookie to clear. Never raises."""
        if not session_token:
            return LogoutOutcome.NO_SESSION
        return LogoutOutcome.CLEARED

    # ------------------------------------------------------------------
    # Building blocks shared with signup
    # ------------------------------------------------------------------

    def authenticate(self, username: str, password: str) -> Credential | None:
        """Return the credential if username/password match, else None.

        Always runs bcrypt whether or not the user exists:
        - Unknown username: bcrypt runs against DUMMY_HASH (same cost as real check)
        - Wrong password: bcrypt runs against the real hash (same cost)
        """
        credential = self._store.get_by_username(username)
        if credential is None or not credential.hashed_password:
            verify_password(password, DUMMY_HASH)
            return None
        if not verify_password(password, credential.hashed_password):
            return None
        return credential

    def issue(self, credential: Credential) -> IssuedSession:
        return IssuedSession(
            access_token=self.keyring.issue_access(_access_claim_for(credential)),
            session_token=self.keyring.issue_session(SessionClaim(username=credential.username)),
        )

    # ------------------------------------------------------------------
    # Cookie contract
    # ------------------------------------------------------------------

    @property
    def cookie_name(self) -> str:
        return self._settings.session_cookie_name

    def set_session_cookie(self, response, token: str) -> None:
        """Write the refresh token as the session cookie on the response.

        httponly=True: JS cannot read the cookie (XSS mitigation).
        samesite="none": the web client is served from another origin, so the
            cookie must travel on cross-site requests. Browsers require
            Secure alongside SameSite=None.
        max_age: matches the refresh token expiry so both expire together.
        """
        response.set_cookie(
            self._settings.session_cookie_name,
            value=token,
            httponly=True,
            secure=self._settings.secure_cookies,
            samesite="none",
            max_age=self._settings.refresh_token_expire_seconds,
            path="/",
        )

    def clear_session_cookie(self, response) -> None:
        """Expire the session cookie.

        Browsers only drop a cookie when the clearing Set-Cookie matches the
        attributes it was set with, so the same flags are repeated here.
        """
        response.delete_cookie(
            self._settings.session_cookie_name,
            httponly=True,
            secure=self._settings.secure_cookies,
            samesite="none",
            path="/",
        )


def _access_claim_for(credential: Credential) -> AccessClaim:
    return AccessClaim(id=credential.id, username=credential.username, name=credential.name)
