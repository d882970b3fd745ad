"""
tests/conftest.py -- Shared test fixtures for Simpan unit and integration tests.

This module provides:
  - settings / user_store / food_store: real components over in-memory SQLite
  - mailer: a recording stand-in for the SMTP transport
  - sessions / accounts / recovery: the auth services wired like production
  - make_user: factory that stores a credential with a known password
  - api: a TestClient over the real FastAPI app with a patched lifespan

Design: the API fixture uses named shared-memory SQLite URIs (not plain
:memory:) because TestClient runs sync route handlers in a thread pool. Plain
:memory: DBs are per-connection and would present a blank schema to each
worker thread. Each test gets its own DB name so tests never share rows.

The environment must be prepared before any app import: api/main.py and
api/limiter.py read Settings at import time, and production mode refuses to
start without the three signing secrets.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

# CRITICAL: configure Settings before any api/core import.
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-secret-0123456789abcdef")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret-0123456789abcdef")
os.environ.setdefault("RESET_TOKEN_SECRET", "test-reset-secret-0123456789abcdef")
os.environ.setdefault("DEBUG", "true")  # permits the low bcrypt cost below
os.environ.setdefault("BCRYPT_ROUNDS", "4")  # bcrypt's minimum; keeps the suite fast
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver", "localhost"]')

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.accounts import AccountProvisioner
from auth.errors import DeliveryError
from auth.models import Credential
from auth.passwords import hash_password
from auth.recovery import RecoveryFlow
from auth.sessions import SessionManager
from auth.store import UserStore
from auth.tokens import TokenKeyring
from core.config import Settings, get_settings
from foods.store import FoodStore

DEFAULT_PASSWORD = "Good1Pass!"


# ---------------------------------------------------------------------------
# Mail stand-in
# ---------------------------------------------------------------------------


@dataclass
class SentMail:
    to: str
    subject: str
    body: str


@dataclass
class FakeMailer:
    """Records every message instead of sending it. Set fail=True to simulate an SMTP outage."""

    fail: bool = False
    sent: list[SentMail] = field(default_factory=list)

    def send(self, to: str, subject: str, body: str) -> None:
        if self.fail:
            raise DeliveryError("Failed to send email")
        self.sent.append(SentMail(to=to, subject=subject, body=body))


# ---------------------------------------------------------------------------
# Component fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return get_settings()


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def food_store() -> Generator[FoodStore, None, None]:
    store = FoodStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def keyring(settings: Settings) -> TokenKeyring:
    return TokenKeyring(settings)


@pytest.fixture
def sessions(settings: Settings, user_store: UserStore, keyring: TokenKeyring) -> SessionManager:
    return SessionManager(settings, user_store, keyring)


@pytest.fixture
def accounts(settings: Settings, user_store: UserStore, sessions: SessionManager) -> AccountProvisioner:
    return AccountProvisioner(settings, user_store, sessions)


@pytest.fixture
def recovery(settings: Settings, user_store: UserStore, mailer: FakeMailer, keyring: TokenKeyring) -> RecoveryFlow:
    return RecoveryFlow(settings, user_store, mailer, keyring)


def _make_user_factory(store: UserStore) -> Callable[..., Credential]:
    def make_user(
        username: str = "ana",
        password: str = DEFAULT_PASSWORD,
        email: str | None = None,
        name: str = "Ana Lim",
    ) -> Credential:
        return store.create_user(
            Credential(
                username=username,
                email=email or f"{username}@mail.com",
                name=name,
                hashed_password=hash_password(password, rounds=4),
            )
        )

    return make_user


@pytest.fixture
def make_user(user_store: UserStore) -> Callable[..., Credential]:
    """Store a credential with a known password (DEFAULT_PASSWORD unless given)."""
    return _make_user_factory(user_store)


# ---------------------------------------------------------------------------
# API fixture
# ---------------------------------------------------------------------------


@dataclass
class ApiHarness:
    client: TestClient
    user_store: UserStore
    food_store: FoodStore
    mailer: FakeMailer
    keyring: TokenKeyring
    make_user: Callable[..., Credential]

    def login(self, username: str = "ana", password: str = DEFAULT_PASSWORD):
        return self.client.post("/auth", json={"username": username, "password": password})

    def bearer_for(self, username: str = "ana", password: str = DEFAULT_PASSWORD) -> dict[str, str]:
        resp = self.login(username, password)
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['accessToken']}"}


def _patch_lifespan(settings: Settings, user_store: UserStore, food_store: FoodStore, mailer: FakeMailer):
    """Return an async context manager that replaces the real lifespan.

    Wires the test stores and the recording mailer into app.state so routes
    hit isolated databases and no real mail is sent.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        keyring = TokenKeyring(settings)
        app.state.user_store = user_store
        app.state.foods = food_store
        app.state.sessions = SessionManager(settings, user_store, keyring)
        app.state.accounts = AccountProvisioner(settings, user_store, app.state.sessions)
        app.state.recovery = RecoveryFlow(settings, user_store, mailer, keyring)
        yield

    return test_lifespan


@pytest.fixture
def api(settings: Settings) -> Generator[ApiHarness, None, None]:
    """Yield an ApiHarness around a TestClient with fresh, isolated stores.

    base_url is https so the client's cookie jar stores and replays the
    Secure session cookie the way a browser would.
    """
    db_id = uuid.uuid4().hex
    user_store = UserStore(f"sqlite:///file:test_auth_{db_id}?mode=memory&cache=shared&uri=true")
    food_store = FoodStore(f"sqlite:///file:test_foods_{db_id}?mode=memory&cache=shared&uri=true")
    mailer = FakeMailer()

    app.router.lifespan_context = _patch_lifespan(settings, user_store, food_store, mailer)

    with TestClient(app, base_url="https://testserver", raise_server_exceptions=True) as client:
        yield ApiHarness(
            client=client,
            user_store=user_store,
            food_store=food_store,
            mailer=mailer,
            keyring=TokenKeyring(settings),
            make_user=_make_user_factory(user_store),
        )

    user_store.close()
    food_store.close()
