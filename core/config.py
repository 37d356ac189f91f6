"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for SessionVault happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  Explicit hand-off: only the process entry point (api/main.py lifespan) calls
      get_settings(). Stores, the token service and the auth service receive
      the secret, TTL and table names as constructor arguments, so nothing
      below the entry point reads process-wide state.

  @model_validator(mode="after"): cross-field validation after all fields are
      resolved. Dev mode generates a signing secret with a warning,
      production mode refuses to start without one.

Security notes:
  [M6] JWT_SECRET shorter than 32 chars is rejected outright. HS256 signing
       relies on key entropy -- a short key weakens every issued token.

  [M7] In production mode (DEBUG not set or false), a missing JWT_SECRET is a
       hard startup failure.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, sessions/, or kvstore/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("sessionvault.config")

_DEFAULT_STORE_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'kvstore' / 'sessionvault.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.

    Environment variable name mapping: field names are uppercased automatically.
    E.g. `jwt_secret` reads from JWT_SECRET, `token_expiry_min` from TOKEN_EXPIRY_MIN.
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
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev secret or raises, so callers never see "".
    jwt_secret: str = ""
    token_expiry_min: int = 60
    login_rate_limit: str = "10/minute"

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    store_url: str = _DEFAULT_STORE_URL
    users_table_name: str = "users"
    sessions_table_name: str = "sessions"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_auth_settings(self) -> "Settings":
        """Enforce the JWT_SECRET policy [M7] and a positive token lifetime.

        Dev mode (DEBUG=true): auto-generate a random secret with a warning.
            Issued tokens will not survive restart -- acceptable for local dev.

        Production mode: refuse to start if JWT_SECRET is missing.

        Both modes: reject secrets shorter than 32 characters [M6].
        """
        if not self.jwt_secret:
            if self.debug:
                self.jwt_secret = secrets.token_hex(32)
                logger.warning("WARNING: Using auto-generated JWT_SECRET. Tokens will not survive restarts.")
            else:
                raise ValueError(
                    "JWT_SECRET is required in production mode. "
                    "Set JWT_SECRET in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.jwt_secret) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters.")
        if self.token_expiry_min <= 0:
            raise ValueError("TOKEN_EXPIRY_MIN must be a positive number of minutes.")
        if not self.users_table_name or not self.sessions_table_name:
            raise ValueError("USERS_TABLE_NAME and SESSIONS_TABLE_NAME must not be empty.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
