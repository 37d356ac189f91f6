"""
api/routes/v1/auth.py -- Registration, authentication and identity endpoints.

Routes:
  POST /api/v1/auth/register      -- create a user; 409 if the email is taken
  POST /api/v1/auth/authenticate  -- email/password login; returns token + expiry
  GET  /api/v1/auth/me            -- the user behind the bearer token (requires auth)

Security:
  [H2] POST /authenticate is rate-limited per IP (LOGIN_RATE_LIMIT).
  [C1] AuthService.authenticate() provides timing equalization -- use it, never inline.
  [M5] Cache-Control: no-store on authenticate responses (they carry tokens).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter, login_rate_limit
from api.models import AuthenticateRequest, AuthResponse, RegisterRequest, UserResponse
from auth.dependencies import get_current_user
from auth.models import User
from auth.service import AuthService

# Auth policy:
# - POST /api/v1/auth/register:      public -- registration creates the first credential
# - POST /api/v1/auth/authenticate:  public -- login endpoint must be unauthenticated
# - GET  /api/v1/auth/me:            requires auth (get_current_user)
router = APIRouter()


@router.post("/auth/register", response_model=UserResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> UserResponse:
    """Register a new user.

    UserStore.create() overwrites silently, so the existence check lives
    here. It is a read-then-write, not a conditional write: two concurrent
    registrations of one email can still both pass it.
    """
    service: AuthService = request.app.state.auth_service
    if service.users.exists(body.email):
        raise HTTPException(
            status_code=409,
            detail={"code": "conflict", "message": "A user with that email already exists."},
        )
    user = service.register(body.email, body.pwd, body.name, body.role)
    return UserResponse.from_user(user)


@limiter.limit(login_rate_limit)  # [H2] must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/authenticate", response_model=AuthResponse)
def authenticate(request: Request, body: AuthenticateRequest) -> JSONResponse:
    """Authenticate with email and password.

    Failure is not an HTTP error: the body carries success=false and a
    message, matching the AuthResult returned by the service.
    """
    service: AuthService = request.app.state.auth_service
    result = service.authenticate(body.email, body.pwd)
    resp = JSONResponse(
        status_code=200,
        content=AuthResponse.from_result(result).model_dump(mode="json"),
    )
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


@router.get("/auth/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Return the user record for the currently authenticated caller."""
    return UserResponse.from_user(current_user)
