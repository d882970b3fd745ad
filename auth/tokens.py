"""
auth/tokens.py -- Signed token codec and the three token classes.

Security design decisions:
  JWT: python-jose with HS256. sign_token() adds an `exp` claim; verify_token()
       returns the caller's claims on success and None on ANY failure --
       malformed encoding, bad signature, missing or elapsed expiry all look the same
       to the caller, so the codec cannot be used as an oracle.

  Token classes: access, refresh (session) and reset tokens are each signed
       with their own secret. A token of one class never verifies under
       another class's secret, and the claim parsers below reject payloads of
       the wrong shape as a second line of defence.

  Wire format: the claim payloads keep the field names the web client
       already decodes -- {"UserInfo": {...}} for access tokens, {"username"}
       for refresh tokens and {"userId"} for reset tokens.

Layer rule: no imports from api/, foods/, or mail/. The keyring is built from
a Settings instance handed in by the caller; this module never reads config
on its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from jose import JWTError, jwt

if TYPE_CHECKING:
    from core.config import Settings

_ALGORITHM = "HS256"

# Registered claims added by sign_token(); stripped again by verify_token().
_REGISTERED_CLAIMS = ("exp",)


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------


def sign_token(claims: dict, secret: str, ttl: timedelta) -> str:
    """Encode claims into a signed JWT valid from now until now + ttl."""
    payload = dict(claims)
    payload["exp"] = datetime.now(timezone.utc) + ttl
    return jwt.encode(payload, secret, algorithm=_ALGORITHM)


def verify_token(token: str, secret: str) -> dict | None:
    """Verify a JWT and return its claims, or None on any failure."""
    try:
        payload = jwt.decode(token, secret, algorithms=[_ALGORITHM], options={"require_exp": True})
    except JWTError:
        return None
    for name in _REGISTERED_CLAIMS:
        payload.pop(name, None)
    return payload


# ---------------------------------------------------------------------------
# Typed claims
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AccessClaim:
    """Identity embedded in an access token. Lives only as long as the token."""

    id: int
    username: str
    name: str

    def to_payload(self) -> dict:
        return {"UserInfo": {"id": self.id, "username": self.username, "name": self.name}}

    @classmethod
    def from_payload(cls, payload: dict) -> AccessClaim | None:
        info = payload.get("UserInfo")
        if not isinstance(info, dict):
            return None
        try:
            return cls(id=info["id"], username=info["username"], name=info["name"])
        except KeyError:
            return None


@dataclass(frozen=True)
class SessionClaim:
    """The long-lived session: just the account it belongs to."""

    username: str

    def to_payload(self) -> dict:
        return {"username": self.username}

    @classmethod
    def from_payload(cls, payload: dict) -> SessionClaim | None:
        username = payload.get("username")
        if not isinstance(username, str) or not username:
            return None
        return cls(username=username)


@dataclass(frozen=True)
class ResetClaim:
    user_id: int

    def to_payload(self) -> dict:
        return {"userId": self.user_id}

    @classmethod
    def from_payload(cls, payload: dict) -> ResetClaim | None:
        if "userId" not in payload:
            return None
        return cls(user_id=payload["userId"])


# ---------------------------------------------------------------------------
# Keyring
# ---------------------------------------------------------------------------


class TokenKeyring:
    """Binds each token class to its own secret and lifetime.

    Built once from Settings at startup and shared read-only by the session
    manager, account provisioner and recovery flow.
    """

    def __init__(self, settings: Settings) -> None:
        self._access_secret = settings.access_token_secret
        self._refresh_secret = settings.refresh_token_secret
        self._reset_secret = settings.reset_token_secret
        self.access_ttl = timedelta(seconds=settings.access_token_expire_seconds)
        self.refresh_ttl = timedelta(seconds=settings.refresh_token_expire_seconds)
        self.reset_ttl = timedelta(seconds=settings.reset_token_expire_seconds)

    def issue_access(self, claim: AccessClaim) -> str:
        return sign_token(claim.to_payload(), self._access_secret, self.access_ttl)

    def verify_access(self, token: str) -> AccessClaim | None:
        payload = verify_token(token, self._access_secret)
        return AccessClaim.from_payload(payload) if payload is not None else None

    def issue_session(self, claim: SessionClaim) -> str:
        return sign_token(claim.to_payload(), self._refresh_secret, self.refresh_ttl)

    def verify_session(self, token: str) -> SessionClaim | None:
        payload = verify_token(token, self._refresh_secret)
        return SessionClaim.from_payload(payload) if payload is not None else None

    def issue_reset(self, claim: ResetClaim) -> str:
        return sign_token(claim.to_payload(), self._reset_secret, self.reset_ttl)

    def verify_reset(self, token: str) -> ResetClaim | None:
        payload = verify_token(token, self._reset_secret)
        return ResetClaim.from_payload(payload) if payload is not None else None
