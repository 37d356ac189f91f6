"""
tests/conftest.py -- Shared test fixtures for SessionVault tests.

This module provides:
  - kv / user_store / session_store: isolated in-memory stores per test
  - auth_service: AuthService wired to user_store with TEST_SECRET
  - api_client: TestClient with a registered user and a bearer token

Design: the API fixture uses a named shared-memory SQLite URI (not plain
:memory:) because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread. The named URI format
(file:name?mode=memory&cache=shared&uri=true) shares one in-memory instance
across all connections in the same process.

DEBUG and LOGIN_RATE_LIMIT must be set before any api/ import so that
get_settings() succeeds without a real JWT_SECRET and the login limiter does
not throttle the test suite.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: set before any api/ or core/ import reads settings.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app, wire_state
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import issue_token
from core.config import Settings
from kvstore.backend import SqlKeyValueStore
from sessions.store import SessionStore

TEST_SECRET = "test-secret-0123456789abcdef0123456789abcdef"
OTHER_SECRET = "other-secret-0123456789abcdef0123456789abcdef"

# ---------------------------------------------------------------------------
# Unit-level fixtures -- one fresh in-memory backend per test
# ---------------------------------------------------------------------------


@pytest.fixture
def kv() -> Generator[SqlKeyValueStore, None, None]:
    store = SqlKeyValueStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def user_store(kv: SqlKeyValueStore) -> UserStore:
    return UserStore(kv, table_name="users")


@pytest.fixture
def session_store(kv: SqlKeyValueStore) -> SessionStore:
    return SessionStore(kv, table_name="sessions")


@pytest.fixture
def auth_service(user_store: UserStore) -> AuthService:
    return AuthService(user_store, secret=TEST_SECRET, ttl_minutes=60)


# ---------------------------------------------------------------------------
# API fixture -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


def _patch_lifespan(settings: Settings, kv: SqlKeyValueStore):
    """Return an async context manager that replaces the real lifespan.

    Wires the pre-created test backend into app.state through the same
    wire_state() the real lifespan uses, so routes see isolated stores.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        wire_state(app, settings, kv)
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str, str], None, None]:
    """Yield (client, token, email) for API integration tests.

    A user "owner@example.com" / "ownerpass123" is registered before the
    client starts and a bearer token is issued for it.
    """
    suffix = request.module.__name__.rsplit(".", 1)[-1]
    kv = SqlKeyValueStore(f"sqlite:///file:test_kv_{suffix}?mode=memory&cache=shared&uri=true")
    settings = Settings(jwt_secret=TEST_SECRET, token_expiry_min=60)

    email = "owner@example.com"
    UserStore(kv, settings.users_table_name).create(email, "ownerpass123", "Owner", "user")
    token, _expires_at = issue_token(email, TEST_SECRET, 60)

    app.router.lifespan_context = _patch_lifespan(settings, kv)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, email

    kv.close()
