"""
core/errors.py -- Error taxonomy shared by every SessionVault layer.

Stores and the token service raise these; auth/service.py folds the
authentication failures into an AuthResult; api/ turns everything else into
an HTTP status. Nothing in this codebase retries on any of them.

Layer rule: core/ is the kernel -- no imports from other packages.
"""

from __future__ import annotations

from enum import Enum


class SessionVaultError(Exception):
    """Base class for every error raised on purpose by this codebase."""


class NotFoundError(SessionVaultError):
    """A lookup by key matched no record. A domain outcome, not a fault."""


class StoreError(SessionVaultError):
    """The key-value backend failed, or a stored item could not be decoded."""


class HashingError(SessionVaultError):
    """bcrypt could not produce a hash for the given input."""


class SigningError(SessionVaultError):
    """A token could not be signed (empty secret or library failure)."""


class TokenErrorReason(str, Enum):
    """Why an Authorization header was rejected, in the order the checks run."""

    MISSING_TOKEN = "missing_token"
    WRONG_SCHEME = "wrong_scheme"
    BAD_SIGNATURE = "bad_signature"
    MALFORMED_CLAIMS = "malformed_claims"
    INVALID_TOKEN = "invalid_token"
    EXPIRED_TOKEN = "expired_token"


_REASON_MESSAGES: dict[TokenErrorReason, str] = {
    TokenErrorReason.MISSING_TOKEN: "No valid Authorization token in request.",
    TokenErrorReason.WRONG_SCHEME: "Authorization token is not a valid Bearer token.",
    TokenErrorReason.BAD_SIGNATURE: "Authorization token signature could not be verified.",
    TokenErrorReason.MALFORMED_CLAIMS: "Authorization token claims are malformed.",
    TokenErrorReason.INVALID_TOKEN: "Invalid authorization token.",
    TokenErrorReason.EXPIRED_TOKEN: "Authorization token has expired.",
}


class TokenValidationError(SessionVaultError):
    """An Authorization header did not yield an identity claim.

    reason is the machine-readable cause; str(exc) is a human-readable
    message that never includes the token itself.
    """

    def __init__(self, reason: TokenErrorReason, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message or _REASON_MESSAGES[reason])
