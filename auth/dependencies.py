"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Protected routes authenticate with the short-lived access token sent as
`Authorization: Bearer <token>`. The refresh cookie is never accepted here --
it is only good for GET /auth/refresh.

Failures raise AuthenticationError, which api/main.py renders like every
other auth error:
  no Bearer header          -> 401 missing_token
  bad / expired signature   -> 403 invalid_token

Layer rule: auth/dependencies.py may import from fastapi (for Request)
because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.errors import AuthenticationError
from auth.sessions import SessionManager
from auth.tokens import AccessClaim


def bearer_token(request: Request) -> str | None:
    """Return the token from an `Authorization: Bearer` header, if any."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.lower().startswith("bearer "):
        return None
    token = auth_header[7:].strip()
    return token or None


def require_access_claim(request: Request) -> AccessClaim:
    """Require a valid access token and return the identity it carries.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(claim: AccessClaim = Depends(require_access_claim)): ...
    """
    token = bearer_token(request)
    if token is None:
        raise AuthenticationError("Authentication required.", code="missing_token")

    sessions: SessionManager = request.app.state.sessions
    claim = sessions.keyring.verify_access(token)
    if claim is None:
        raise AuthenticationError("Access token is invalid or has expired.", code="invalid_token", status_code=403)
    return claim
