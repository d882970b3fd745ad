"""
auth/recovery.py -- Forgot-password: issue a reset token and mail the link.

The reset token carries only the user id, is signed with its own secret and
expires after an hour. It is embedded raw in a link to the web client's
reset page and delivered by mail.

Nothing in this service redeems the token yet: there is no endpoint that
accepts it together with a new password, and issuing a second token does not
invalidate the first. See DESIGN.md ("Reset-token redemption").

Layer rule: no imports from api/ or foods/. The mailer is injected.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from auth.errors import NotFoundError, ValidationError
from auth.tokens import ResetClaim, TokenKeyring

if TYPE_CHECKING:
    from core.config import Settings
    from auth.store import UserStore
    from mail.transport import Mailer

logger = logging.getLogger("simpan.auth")

RESET_SUBJECT = "Password Reset"


class RecoveryFlow:
    def __init__(
        self,
        settings: Settings,
        store: UserStore,
        mailer: Mailer,
        keyring: TokenKeyring | None = None,
    ) -> None:
        self._reset_url_base = settings.reset_url_base.rstrip("/")
        self._store = store
        self._mailer = mailer
        self._keyring = keyring or TokenKeyring(settings)

    def forgot_password(self, email: str) -> str:
        """Mail a password-reset link to the account registered under email.

        Returns the reset URL that was sent. Raises ValidationError when email
        is empty, NotFoundError when no account uses it (no mail is sent), and
        DeliveryError when the mailer fails.
        """
        if not email:
            raise ValidationError("Email is required")

        credential = self._store.get_by_email(email)
        if credential is None:
            raise NotFoundError("User not found")

        token = self._keyring.issue_reset(ResetClaim(user_id=credential.id))
        reset_url = f"{self._reset_url_base}/{token}"
        logger.info("Reset token issued for user_id=%s", credential.id)

        self._mailer.send(
            credential.email,
            RESET_SUBJECT,
            f"Please click the following link to reset your password: {reset_url}",
        )
        return reset_url
