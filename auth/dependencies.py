"""
auth/dependencies.py -- FastAPI Depends() helpers for bearer authentication.

Only one auth method exists: the Authorization: Bearer <token> header. The
header value is handed unchanged to AuthService.identity(), so the missing /
wrong-scheme / bad-signature distinctions made by auth/tokens.py reach the
client as the error code of the 401 response.

get_current_email() resolves the token to its identity claim without a
store read. get_current_user() additionally loads the User record.

Layer rule: no imports from api/ or sessions/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import User
from auth.service import AuthService
from core.errors import NotFoundError, TokenValidationError


def _auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_current_email(request: Request) -> str:
    """Require a valid bearer token. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(email: str = Depends(get_current_email)): ...
    """
    header = request.headers.get("Authorization")
    try:
        return _auth_service(request).identity(header)
    except TokenValidationError as exc:
        raise HTTPException(
            status_code=401,
            detail={"code": exc.reason.value, "message": str(exc)},
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def get_current_user(request: Request) -> User:
    """Require a valid bearer token whose email still has a user record.

    A token for an email with no stored user is treated as unauthenticated
    (401), not as a missing resource.
    """
    email = get_current_email(request)
    try:
        return _auth_service(request).users.find_by_identifier(email)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=401,
            detail={"code": "unknown_user", "message": "Token does not belong to a registered user."},
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
