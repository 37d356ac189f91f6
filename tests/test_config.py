"""Unit tests for core/config.py -- Settings validation.

Covers:
- production mode refuses to start without JWT_SECRET
- debug mode generates a secret of acceptable length
- short secrets and non-positive token lifetimes are rejected
- environment variables map onto fields (TOKEN_EXPIRY_MIN, *_TABLE_NAME)
"""

from __future__ import annotations

import pytest

from core.config import Settings, get_settings

GOOD_SECRET = "x" * 32


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    for var in ("JWT_SECRET", "TOKEN_EXPIRY_MIN", "USERS_TABLE_NAME", "SESSIONS_TABLE_NAME"):
        monkeypatch.delenv(var, raising=False)
    yield
    get_settings.cache_clear()


def test_missing_secret_in_production_fails():
    with pytest.raises(ValueError):
        Settings(debug=False, jwt_secret="")


def test_debug_mode_generates_secret():
    settings = Settings(debug=True, jwt_secret="")
    assert len(settings.jwt_secret) >= 32


def test_short_secret_rejected():
    with pytest.raises(ValueError):
        Settings(debug=True, jwt_secret="too-short")


@pytest.mark.parametrize("minutes", [0, -5])
def test_non_positive_expiry_rejected(minutes: int):
    with pytest.raises(ValueError):
        Settings(jwt_secret=GOOD_SECRET, token_expiry_min=minutes)


def test_defaults():
    settings = Settings(jwt_secret=GOOD_SECRET)
    assert settings.token_expiry_min == 60
    assert settings.users_table_name == "users"
    assert settings.sessions_table_name == "sessions"


def test_reads_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("JWT_SECRET", GOOD_SECRET)
    monkeypatch.setenv("TOKEN_EXPIRY_MIN", "15")
    monkeypatch.setenv("USERS_TABLE_NAME", "dev_users")
    monkeypatch.setenv("SESSIONS_TABLE_NAME", "dev_sessions")
    get_settings.cache_clear()
    settings = get_settings()
    assert settings.jwt_secret == GOOD_SECRET
    assert settings.token_expiry_min == 15
    assert settings.users_table_name == "dev_users"
    assert settings.sessions_table_name == "dev_sessions"
