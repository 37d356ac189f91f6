"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors
sessions/models.py -- dataclasses own domain shape; stores and routes do the
work. The item mappers beside each dataclass translate to and from the
attribute maps persisted by kvstore/.

Layer rule: no imports from api/ or sessions/.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from core.models import Meta


@dataclass
class User:
    """A registered identity.

    email is the unique key of the users table and never changes after
    registration. pwd holds the bcrypt hash -- the plaintext is never stored.
    role is carried for callers; nothing in this codebase enforces it.
    """

    email: str
    pwd: str
    name: str
    role: str  # free-form, e.g. "user", "admin"
    meta: Meta = field(default_factory=Meta.fresh)

    def to_item(self) -> dict:
        return {
            "email": self.email,
            "pwd": self.pwd,
            "name": self.name,
            "role": self.role,
            "meta": self.meta.to_item(),
        }

    @classmethod
    def from_item(cls, item: dict) -> "User":
        return cls(
            email=item["email"],
            pwd=item["pwd"],
            name=item["name"],
            role=item["role"],
            meta=Meta.from_item(item["meta"]),
        )


@dataclass(frozen=True)
class AuthResult:
    """Outcome of one authentication attempt. Built once, never mutated.

    Use AuthResult.failed() / AuthResult.succeeded() rather than the
    constructor so the success-only and failure-only fields stay consistent.
    """

    success: bool
    message: Optional[str] = None
    token: Optional[str] = None
    expires_at: Optional[datetime] = None
    user: Optional[User] = None

    @classmethod
    def failed(cls, message: str) -> "AuthResult":
        return cls(success=False, message=message)

    @classmethod
    def succeeded(cls, token: str, expires_at: datetime, user: Optional[User] = None) -> "AuthResult":
        return cls(success=True, token=token, expires_at=expires_at, user=user)
