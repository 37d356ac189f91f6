"""
auth/tokens.py -- Bearer token issuance and validation.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry a single identity claim ("email")
       plus an "exp" claim. The signing secret and lifetime are parameters --
       this module reads no settings, so two callers with different secrets
       can never see each other's configuration.

  Expiry: issue_token() returns the expiry instant separately from the token
       and that returned value is what callers compare against. The same
       instant is embedded as "exp"; python-jose rejects the token once it
       passes, which validate_token() reports as EXPIRED_TOKEN.

  Claims: decoded into TokenClaims (pydantic) rather than read out of a raw
       dict. A claim of the wrong type fails fast as MALFORMED_CLAIMS instead
       of surfacing later as a KeyError or a non-string identity.

  Logging: neither the token nor the Authorization header is ever logged --
       only the rejection reason.

Layer rule: no imports from api/, sessions/, or kvstore/.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jws, jwt
from jose.exceptions import JWSError
from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError

from core.errors import SigningError, TokenErrorReason, TokenValidationError
from core.models import utc_now

logger = logging.getLogger("sessionvault.auth")

ALGORITHM = "HS256"
BEARER_PREFIX = "Bearer "
IDENTITY_CLAIM = "email"


class TokenClaims(BaseModel):
    """The claim set this service issues and accepts.

    Unknown claims are ignored. email is optional here so that "claim absent"
    (INVALID_TOKEN) can be told apart from "claim has the wrong type"
    (MALFORMED_CLAIMS).
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    email: Optional[StrictStr] = None
    exp: Optional[int] = None


# ---------------------------------------------------------------------------
# Issue
# ---------------------------------------------------------------------------


def issue_token(identity: str, secret: str, ttl_minutes: int) -> tuple[str, datetime]:
    """Sign a token for identity and return (token, expires_at).

    expires_at is now + ttl_minutes in UTC. Raises SigningError if the secret
    is empty or python-jose cannot sign.
    """
    if not secret:
        raise SigningError("Token signing secret is not configured.")
    expires_at = utc_now() + timedelta(minutes=ttl_minutes)
    payload = {IDENTITY_CLAIM: identity, "exp": expires_at}
    try:
        token = jwt.encode(payload, secret, algorithm=ALGORITHM)
    except JWTError as exc:
        raise SigningError(f"Token could not be signed: {exc}") from exc
    return token, expires_at


# ---------------------------------------------------------------------------
# Validate
# ---------------------------------------------------------------------------


def validate_token(header_value: Optional[str], secret: str) -> str:
    """Return the identity claim carried by an Authorization header value.

    Checks run in a fixed order and the first failure wins:
      1. header absent or empty          -> MISSING_TOKEN
      2. not "Bearer <token>"            -> WRONG_SCHEME
      3. signature does not verify       -> BAD_SIGNATURE
      4. claims not a JSON object, or
         not the expected shape          -> MALFORMED_CLAIMS
         (exp in the past               -> EXPIRED_TOKEN)
      5. identity claim absent           -> INVALID_TOKEN

    Raises TokenValidationError; never returns an empty identity.
    """
    if not header_value:
        raise _reject(TokenErrorReason.MISSING_TOKEN)
    if not header_value.startswith(BEARER_PREFIX):
        raise _reject(TokenErrorReason.WRONG_SCHEME)
    token = header_value[len(BEARER_PREFIX) :]

    try:
        raw_claims = jws.verify(token, secret, algorithms=[ALGORITHM])
    except JWSError as exc:
        raise _reject(TokenErrorReason.BAD_SIGNATURE) from exc

    # Signature is trusted from here on; anything else is a claims problem.
    try:
        body = json.loads(raw_claims)
    except ValueError as exc:
        raise _reject(TokenErrorReason.MALFORMED_CLAIMS) from exc
    if not isinstance(body, dict):
        raise _reject(TokenErrorReason.MALFORMED_CLAIMS)

    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except ExpiredSignatureError as exc:
        raise _reject(TokenErrorReason.EXPIRED_TOKEN) from exc
    except JWTError as exc:
        raise _reject(TokenErrorReason.MALFORMED_CLAIMS) from exc

    try:
        claims = TokenClaims.model_validate(payload)
    except ValidationError as exc:
        raise _reject(TokenErrorReason.MALFORMED_CLAIMS) from exc

    if not claims.email:
        raise _reject(TokenErrorReason.INVALID_TOKEN)
    return claims.email


def _reject(reason: TokenErrorReason) -> TokenValidationError:
    logger.info("Rejected authorization token: %s", reason.value)
    return TokenValidationError(reason)
