"""
api/routes/v1/sessions.py -- Owner-scoped session endpoints.

Routes:
  GET  /api/v1/sessions        -- all sessions owned by the caller
  GET  /api/v1/sessions/{id}   -- one session owned by the caller; 404 otherwise
  POST /api/v1/sessions        -- create (no id or unknown id) or update a session

Every route requires a bearer token. The owner email always comes from the
token, never from the request body, so a caller cannot read or write another
user's sessions.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from api.models import SessionInput, SessionResponse
from auth.dependencies import get_current_email
from sessions.store import SessionStore

router = APIRouter()


def _store(request: Request) -> SessionStore:
    return request.app.state.session_store


@router.get("/sessions", response_model=list[SessionResponse])
def list_sessions(request: Request, email: str = Depends(get_current_email)) -> list[SessionResponse]:
    """List the caller's sessions in backend order. Empty list if none."""
    return [SessionResponse.from_session(s) for s in _store(request).list_by_owner(email)]


@router.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session(request: Request, session_id: str, email: str = Depends(get_current_email)) -> SessionResponse:
    """Return one session by id, scoped to the caller."""
    return SessionResponse.from_session(_store(request).find_by_identifier(session_id, email))


@router.post("/sessions", response_model=SessionResponse)
def save_session(
    request: Request,
    body: SessionInput,
    email: str = Depends(get_current_email),
) -> SessionResponse:
    """Create or update a session owned by the caller.

    An id with no stored record for the caller is created under that id. Ids
    are scoped by owner, so reusing another user's id never touches their
    session.
    """
    if body.email is not None and body.email != email:
        raise HTTPException(
            status_code=403,
            detail={"code": "forbidden", "message": "Sessions can only be saved for the authenticated user."},
        )
    saved = _store(request).upsert(body.to_session(owner=email))
    return SessionResponse.from_session(saved)
