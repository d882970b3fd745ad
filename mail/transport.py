"""
mail/transport.py -- Outbound mail for password recovery.

Mailer is the collaborator interface the recovery flow depends on: one
blocking send() call that either returns or raises DeliveryError. SmtpMailer
is the production implementation over smtplib; tests substitute a recording
fake.

Failures are surfaced, never retried here -- the caller reports them to the
client as a delivery error and the user can ask again.

Layer rule: may import from auth.errors only; no imports from api/.
"""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import TYPE_CHECKING, Protocol

from auth.errors import DeliveryError

if TYPE_CHECKING:
    from core.config import Settings

logger = logging.getLogger("simpan.mail")


class Mailer(Protocol):
    def send(self, to: str, subject: str, body: str) -> None: ...


class SmtpMailer:
    """Sends plain-text mail through an SMTP relay configured in Settings."""

    def __init__(self, settings: Settings) -> None:
        self._host = settings.smtp_host
        self._port = settings.smtp_port
        self._username = settings.smtp_username
        self._password = settings.smtp_password
        self._use_tls = settings.smtp_use_tls
        self._timeout = settings.smtp_timeout_seconds
        self._sender = settings.mail_from

    def send(self, to: str, subject: str, body: str) -> None:
        msg = EmailMessage()
        msg["From"] = self._sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)

        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                if self._use_tls:
                    server.starttls()
                if self._username and self._password:
                    server.login(self._username, self._password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("Mail delivery to %s via %s:%d failed: %s", to, self._host, self._port, exc)
            raise DeliveryError("Failed to send email") from exc
        logger.info("Mail sent to %s (subject=%r)", to, subject)
