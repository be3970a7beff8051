"""
api/routes/v1/auth.py -- Session introspection for API clients.

Routes:
  GET  /api/v1/auth/me  -- current user info (requires a session cookie)

Login, registration and logout are form flows and live in web/routes.py.
This router only lets a script or front end ask "who am I?" with the same
cookie the browser carries.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from api.models import MeResponse
from auth.dependencies import Unauthorized, require_user_id
from auth.store import UserStore

# Auth policy:
# - GET /api/v1/auth/me: requires a valid session (require_user_id)
router = APIRouter()


@router.get("/auth/me", response_model=MeResponse)
def me(request: Request) -> MeResponse:
    """Return identity information for the current session.

    API clients get a 401 rather than a login redirect. A session whose user
    no longer exists is treated the same way.
    """
    user_id = require_user_id(request)
    if isinstance(user_id, Unauthorized):
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return MeResponse(user_id=user.id or "", username=user.username)
