"""
auth/passwords.py -- bcrypt password hashing and verification.

Using bcrypt directly rather than passlib[bcrypt] because passlib's internal
wrap-bug detection creates a password longer than 72 bytes, which bcrypt 4.x
rejects with an explicit error. Direct bcrypt usage is simpler and has no
compatibility shim.

The cost factor is fixed at DEFAULT_ROUNDS. bcrypt embeds the cost in every
hash, so raising it later only affects new hashes; existing ones still verify.

Neither function logs its inputs.
"""

from __future__ import annotations

import bcrypt

from core.errors import HashingError

DEFAULT_ROUNDS = 12


def hash_password(plain: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    bcrypt only looks at the first 72 bytes of its input and recent releases
    refuse longer input outright. The API layer caps passwords at 72
    characters; anything bcrypt still rejects surfaces as HashingError.
    """
    try:
        return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")
    except (ValueError, TypeError) as exc:
        raise HashingError("Password could not be hashed.") from exc


def verify_password(hashed: str, candidate: str) -> bool:
    """Return True if candidate matches the stored bcrypt hash.

    Any failure inside bcrypt (malformed stored hash, over-long candidate,
    wrong types) is reported as a plain mismatch so callers cannot tell a
    corrupt record from a wrong password.
    """
    try:
        return bcrypt.checkpw(candidate.encode("utf-8"), hashed.encode("utf-8"))
    except Exception:
        return False
