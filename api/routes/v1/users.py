"""
api/routes/v1/users.py -- User lookup endpoint.

Routes:
  GET /api/v1/users/{email} -- look up a user by email (requires auth)

Role is carried on the record but not enforced: any authenticated caller
may look up any user. The password hash is never returned.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.models import UserResponse
from auth.dependencies import get_current_email
from auth.store import UserStore

router = APIRouter()


@router.get("/users/{email}", response_model=UserResponse)
def get_user(request: Request, email: str, _caller: str = Depends(get_current_email)) -> UserResponse:
    """Return the user registered under email. NotFoundError becomes a 404."""
    user_store: UserStore = request.app.state.user_store
    return UserResponse.from_user(user_store.find_by_identifier(email))
