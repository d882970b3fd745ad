"""
api/routes/v1/auth.py -- Session lifecycle endpoints.

Routes:
  POST /auth                  -- password login; body {accessToken} + refresh cookie
  GET  /auth/refresh          -- new access token from the refresh cookie
  POST /auth/logout           -- clear the refresh cookie (204 if there was none)
  POST /auth/forgot-password  -- mail a password-reset link
  POST /auth/signup           -- create an account and log it in

All five are public. Errors are raised as auth.errors.AuthError subclasses
and rendered by the handler in api/main.py, so every failure has the same
{"error": {"code", "message"}} shape.

Security:
  Login, signup and forgot-password are rate-limited per client IP.
  Unknown username and wrong password share one error (bad_credentials).
  Responses that carry a token set Cache-Control: no-store.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from api.limiter import AUTH_RATE_LIMIT, limiter
from api.models import AccessTokenResponse, ForgotPasswordRequest, LoginRequest, MessageResponse, SignupRequest
from auth.accounts import AccountProvisioner
from auth.recovery import RecoveryFlow
from auth.sessions import IssuedSession, LogoutOutcome, SessionManager

router = APIRouter()


# ---------------------------------------------------------------------------
# Login / refresh / logout
# ---------------------------------------------------------------------------


@limiter.limit(AUTH_RATE_LIMIT)  # brute-force mitigation -- must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth", response_model=AccessTokenResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username and password.

    The access token comes back in the body; the refresh token is set as the
    httpOnly session cookie and never appears in the body.
    """
    sessions: SessionManager = request.app.state.sessions
    issued = sessions.login(body.username, body.password)
    return _session_response(sessions, issued, status_code=200)


@router.get("/auth/refresh", response_model=AccessTokenResponse)
def refresh(request: Request) -> JSONResponse:
    """Exchange the refresh cookie for a new access token.

    401 when the cookie is missing or its account is gone, 403 when the
    token is forged or expired. The cookie itself is left untouched.
    """
    sessions: SessionManager = request.app.state.sessions
    access_token = sessions.renew(request.cookies.get(sessions.cookie_name))
    resp = JSONResponse(content=AccessTokenResponse(access_token=access_token).model_dump(by_alias=True))
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/logout", response_model=MessageResponse)
def logout(request: Request) -> Response:
    """Clear the refresh cookie. Idempotent: no cookie means 204 No Content.

    The refresh token is not revoked -- a copy of it stays valid until it
    expires. Only the browser's carrier is removed.
    """
    sessions: SessionManager = request.app.state.sessions
    outcome = sessions.logout(request.cookies.get(sessions.cookie_name))
    if outcome is LogoutOutcome.NO_SESSION:
        return Response(status_code=204)
    resp = JSONResponse(content=MessageResponse(message="Cookie cleared").model_dump())
    sessions.clear_session_cookie(resp)
    return resp


# ---------------------------------------------------------------------------
# Recovery and signup
# ---------------------------------------------------------------------------


@limiter.limit(AUTH_RATE_LIMIT)
@router.post("/auth/forgot-password", response_model=MessageResponse)
def forgot_password(request: Request, body: ForgotPasswordRequest) -> MessageResponse:
    """Mail a reset link to the account that owns the given email address."""
    recovery: RecoveryFlow = request.app.state.recovery
    recovery.forgot_password(body.email)
    return MessageResponse(message="Password reset email sent")


@limiter.limit(AUTH_RATE_LIMIT)
@router.post("/auth/signup", response_model=AccessTokenResponse, status_code=201)
def signup(request: Request, body: SignupRequest) -> JSONResponse:
    """Create an account and start a session for it in one step."""
    accounts: AccountProvisioner = request.app.state.accounts
    sessions: SessionManager = request.app.state.sessions
    issued = accounts.signup(body.username, body.password, body.name, body.email)
    return _session_response(sessions, issued, status_code=201)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _session_response(sessions: SessionManager, issued: IssuedSession, status_code: int) -> JSONResponse:
    resp = JSONResponse(
        status_code=status_code,
        content=AccessTokenResponse(access_token=issued.access_token).model_dump(by_alias=True),
    )
    sessions.set_session_cookie(resp, issued.session_token)
    resp.headers["Cache-Control"] = "no-store"
    return resp
