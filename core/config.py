"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for Simpan happen here. No module should call
os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. Only the
      process entry points (api/main.py lifespan, api/limiter.py) call it;
      everything below them receives the Settings object through its
      constructor.

  @model_validator(mode="after"): Runs cross-field validation after all fields
      are resolved from environment. Used for the three signing secrets: dev
      mode generates them with a warning, production mode refuses to start
      without them.

Security notes:
  [S1] Three independent secrets sign the three token classes (access,
       refresh, reset). Rotating or leaking one never affects the others, so
       the validator also rejects configurations where two secrets are equal.

  [S2] Secrets shorter than 32 chars are rejected outright. HS256 signing
       relies on key entropy -- a short key weakens every token of that class.

  [S3] bcrypt_rounds below 10 is only accepted in debug mode (the test suite
       runs with 4).

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, foods/, or mail/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("simpan.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'simpan.db'}"

_SECRET_FIELDS = ("access_token_secret", "refresh_token_secret", "reset_token_secret")

_DAY = 24 * 60 * 60

# Lowest bcrypt cost accepted outside debug mode.
_MIN_BCRYPT_ROUNDS = 10


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file. The model_validator enforces
    production-safety rules at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Token signing -- one secret per token class [S1]
    # ------------------------------------------------------------------

    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    access_token_secret: str = ""
    refresh_token_secret: str = ""
    reset_token_secret: str = ""

    access_token_expire_seconds: int = 7 * _DAY
    refresh_token_expire_seconds: int = 7 * _DAY
    reset_token_expire_seconds: int = 60 * 60

    # ------------------------------------------------------------------
    # Passwords and cookies
    # ------------------------------------------------------------------

    bcrypt_rounds: int = 10
    session_cookie_name: str = "jwt"
    # The refresh cookie is sent cross-site (SameSite=None), which browsers
    # only accept together with Secure.
    secure_cookies: bool = True

    # ------------------------------------------------------------------
    # Password recovery mail
    # ------------------------------------------------------------------

    reset_url_base: str = "https://localhost:3000/reset-password"
    mail_from: str = "simpan.app.mail@gmail.com"
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    smtp_timeout_seconds: float = 10.0

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    auth_rate_limit: str = "10/minute"
    rate_limit_enabled: bool = True
    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost"]
    cors_origins: list[str] = ["http://localhost:3000", "https://localhost:3000"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_token_secrets(self) -> "Settings":
        """Enforce the signing-secret policy [S1][S2].

        Dev mode (DEBUG=true): auto-generate any missing secret with a warning.
            Tokens will not survive restart -- acceptable for local dev.

        Production mode (DEBUG=false or not set): refuse to start if any
            secret is missing.

        Both modes: reject secrets shorter than 32 characters and secrets
            shared between token classes.
        """
        for field in _SECRET_FIELDS:
            value = getattr(self, field)
            if not value:
                if self.debug:
                    setattr(self, field, secrets.token_hex(32))
                    logger.warning(
                        "WARNING: Using auto-generated %s. Tokens will not persist across restarts.",
                        field.upper(),
                    )
                    continue
                raise ValueError(
                    f"{field.upper()} is required in production mode. "
                    "Set it in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
            if len(value) < 32:
                raise ValueError(f"{field.upper()} must be at least 32 characters.")

        values = [getattr(self, field) for field in _SECRET_FIELDS]
        if len(set(values)) != len(values):
            raise ValueError("ACCESS_TOKEN_SECRET, REFRESH_TOKEN_SECRET and RESET_TOKEN_SECRET must all differ.")
        return self

    @model_validator(mode="after")
    def validate_bcrypt_rounds(self) -> "Settings":
        """Enforce the password hashing work factor [S3]."""
        if self.bcrypt_rounds < _MIN_BCRYPT_ROUNDS and not self.debug:
            raise ValueError(
                f"BCRYPT_ROUNDS must be at least {_MIN_BCRYPT_ROUNDS} in production mode. "
                "To run in development mode, set DEBUG=true."
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
