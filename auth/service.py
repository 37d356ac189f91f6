"""
auth/service.py -- Registration and authentication orchestration.

authenticate() is a short, one-way state machine:

    Start    -- look up the user by email
      | not found / store error  -> AuthResult.failed(_NO_RECORD)
    Found    -- bcrypt-verify the submitted password
      | mismatch                 -> AuthResult.failed(_BAD_PASSWORD)
    Verified -- sign a token for the email
      | SigningError             -> AuthResult.failed(str(error))
    Issued   -> AuthResult.succeeded(token, expires_at, user)

Every outcome is returned, never raised, and nothing is retried.

Timing equalization [C1]: when the lookup fails, bcrypt still runs against
_DUMMY_HASH so the not-found branch costs the same as a wrong password.

AuthService receives its store, secret and TTL through the constructor.

Layer rule: no imports from api/ or sessions/.
"""

from __future__ import annotations

import logging
from typing import Optional

from auth.models import AuthResult, User
from auth.passwords import hash_password, verify_password
from auth.store import UserStore
from auth.tokens import issue_token, validate_token
from core.errors import NotFoundError, SigningError, StoreError

logger = logging.getLogger("sessionvault.auth")

_NO_RECORD = "Unable to find a record with the given email. Please verify your email and try again."
_BAD_PASSWORD = (
    "The password submitted does not match this user's password. "
    "Please check the email and password and try again."
)

# Computed once at import so the first failed login is not measurably slower
# than later ones.
_DUMMY_HASH: str = hash_password("sessionvault_timing_dummy")


class AuthService:
    """Register users, authenticate them and resolve bearer tokens to users.

    Usage:
        service = AuthService(user_store, secret=settings.jwt_secret, ttl_minutes=60)
        service.register("a@x.com", "secret", "A", "user")
        result = service.authenticate("a@x.com", "secret")
        user = service.current_user("Bearer " + result.token)
    """

    def __init__(self, users: UserStore, secret: str, ttl_minutes: int) -> None:
        self.users = users
        self._secret = secret
        self.ttl_minutes = ttl_minutes

    def register(self, email: str, password: str, name: str, role: str) -> User:
        """Create a user record. Overwrites any record under the same email."""
        return self.users.create(email, password, name, role)

    def authenticate(self, email: str, password: str) -> AuthResult:
        """Check email/password and, on success, issue a bearer token."""
        user: Optional[User] = None
        try:
            user = self.users.find_by_identifier(email)
        except NotFoundError:
            pass
        except StoreError:
            logger.exception("User lookup failed during authentication for email=%s", email)

        if user is None:
            verify_password(_DUMMY_HASH, password)
            return AuthResult.failed(_NO_RECORD)

        if not verify_password(user.pwd, password):
            logger.info("Password mismatch for email=%s", email)
            return AuthResult.failed(_BAD_PASSWORD)

        try:
            token, expires_at = issue_token(user.email, self._secret, self.ttl_minutes)
        except SigningError as exc:
            logger.error("Token signing failed for email=%s: %s", email, exc)
            return AuthResult.failed(str(exc))

        logger.info("Authenticated email=%s (token expires %s)", email, expires_at.isoformat())
        return AuthResult.succeeded(token=token, expires_at=expires_at, user=user)

    def identity(self, header_value: Optional[str]) -> str:
        """Return the email carried by an Authorization header. Raises TokenValidationError."""
        return validate_token(header_value, self._secret)

    def current_user(self, header_value: Optional[str]) -> User:
        """Resolve an Authorization header to the stored user.

        Raises TokenValidationError, NotFoundError or StoreError.
        """
        return self.users.find_by_identifier(self.identity(header_value))
