"""
API request and response models for SessionVault REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
sessions/models.py, which own the internal domain representation. Route
handlers map between the two through the from_* factory methods below.

Separation of concerns: domain dataclasses = domain truth; api/ models = API contract.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.models import AuthResult, User
from core.models import Meta, as_utc
from sessions.models import Session

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Deliberately loose: one "@" with something on both sides. Deliverability is
# not this service's concern.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"

# bcrypt ignores (and recent releases reject) input past 72 bytes of UTF-8.
_MAX_PASSWORD_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > _MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {_MAX_PASSWORD_BYTES} bytes when UTF-8 encoded")
    return value


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(min_length=3, max_length=255, pattern=EMAIL_PATTERN)
    pwd: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=255)
    role: str = Field(default="user", min_length=1, max_length=30)

    check_pwd_bytes = field_validator("pwd")(_check_password_bytes)


class AuthenticateRequest(BaseModel):
    """Request body for POST /api/v1/auth/authenticate."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(min_length=1, max_length=255)
    pwd: str = Field(min_length=1)

    check_pwd_bytes = field_validator("pwd")(_check_password_bytes)


class SessionInput(BaseModel):
    """Request body for POST /api/v1/sessions.

    Omit id to create a session; send the id returned earlier to update it.
    email is optional -- the owner is always the authenticated user, and a
    mismatching email is rejected.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = Field(default=None, max_length=64)
    email: Optional[str] = Field(default=None, max_length=255)
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    session_start_date: datetime
    session_end_date: Optional[datetime] = None
    status: str = Field(min_length=1, max_length=30)

    @field_validator("session_start_date", "session_end_date")
    @classmethod
    def normalize_to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Store every date UTC-aware so it reads back exactly as written."""
        return as_utc(value) if value is not None else None

    def to_session(self, owner: str) -> Session:
        return Session(
            id=self.id or None,
            email=owner,
            name=self.name,
            description=self.description,
            session_start_date=self.session_start_date,
            session_end_date=self.session_end_date,
            status=self.status,
        )


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class MetaResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    created_at: datetime
    updated_at: datetime
    is_active: bool

    @classmethod
    def from_meta(cls, meta: Meta) -> "MetaResponse":
        return cls(created_at=meta.created_at, updated_at=meta.updated_at, is_active=meta.is_active)


class UserResponse(BaseModel):
    """Public view of a user. The password hash is never serialized."""

    model_config = ConfigDict(frozen=True)

    email: str
    name: str
    role: str
    meta: MetaResponse

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(email=user.email, name=user.name, role=user.role, meta=MetaResponse.from_meta(user.meta))


class AuthResponse(BaseModel):
    """Response for POST /api/v1/auth/authenticate.

    Always returned with HTTP 200: success=false is a normal outcome, with
    message explaining why. token / expires_at / user are only set on success.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    message: Optional[str] = None
    token: Optional[str] = None
    expires_at: Optional[datetime] = None
    user: Optional[UserResponse] = None

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponse":
        return cls(
            success=result.success,
            message=result.message,
            token=result.token,
            expires_at=result.expires_at,
            user=UserResponse.from_user(result.user) if result.user is not None else None,
        )


class SessionResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    name: str
    description: Optional[str] = None
    session_start_date: datetime
    session_end_date: Optional[datetime] = None
    status: str
    meta: Optional[MetaResponse] = None

    @classmethod
    def from_session(cls, session: Session) -> "SessionResponse":
        return cls(
            id=session.id or "",
            email=session.email,
            name=session.name,
            description=session.description,
            session_start_date=session.session_start_date,
            session_end_date=session.session_end_date,
            status=session.status,
            meta=MetaResponse.from_meta(session.meta) if session.meta is not None else None,
        )


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
