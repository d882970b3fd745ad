"""
auth/errors.py -- Error taxonomy for the authentication core.

Every failure the core can report is one of five kinds. Each instance carries
a machine-readable code, a human-readable message, and the HTTP status the
API layer should answer with. api/main.py renders all of them through one
exception handler into the ErrorResponse envelope, so no stack trace or
internal detail reaches the client.

  ValidationError      400  missing or malformed input
  AuthenticationError  401  bad credentials, missing/unknown session
                       403  invalid or expired session token
  ConflictError        409  duplicate username or email
  NotFoundError        404  unknown email in password recovery
  DeliveryError        500  mail transport failure (never retried)

Layer rule: no imports from api/, foods/, or mail/.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for every error the auth core raises on purpose."""

    status_code: int = 500
    code: str = "auth_error"

    def __init__(self, message: str, *, code: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationError(AuthError):
    status_code = 400
    code = "validation_error"


class AuthenticationError(AuthError):
    """Authentication failed.

    Login deliberately uses a single code for unknown user and wrong password.
    Session renewal uses distinct codes (and 401 vs 403) so that a missing
    cookie can be told apart from a forged or expired one in logs.
    """

    status_code = 401
    code = "unauthorized"


class ConflictError(AuthError):
    status_code = 409
    code = "conflict"

    def __init__(self, message: str, *, field: str) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(AuthError):
    status_code = 404
    code = "not_found"


class DeliveryError(AuthError):
    status_code = 500
    code = "delivery_failed"
