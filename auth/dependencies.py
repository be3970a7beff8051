"""
auth/dependencies.py -- Session guard helpers used by every route.

The session lives entirely in one signed cookie (Settings.session_cookie_name).
Nothing is stored server side between requests.

current_user_id() is the soft variant (returns None on any failure).
require_user_id() returns the user id or an Unauthorized value carrying the
request path -- it never raises, so each caller decides explicitly how to
react (redirect a form post, 401 a deep-linked page):

    result = require_user_id(request)
    if isinstance(result, Unauthorized):
        return result.redirect()

create_session() / end_session() build the redirect responses that set and
clear the cookie.

Layer rule: no imports from api/, web/, or jokes/.
  auth/dependencies.py may import from fastapi (for Request/responses)
  because this module is the seam between the auth core and HTTP.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import RedirectResponse

from auth.errors import SessionError
from auth.tokens import SessionCodec
from core.config import get_settings

logger = logging.getLogger("jokebox.auth")

LOGIN_PATH = "/login"


@dataclass(frozen=True)
class Unauthorized:
    """No valid session on a route that needs one.

    return_to is the path the user was trying to reach; the login flow sends
    them back there after a successful sign-in.
    """

    return_to: str

    def login_url(self) -> str:
        return f"{LOGIN_PATH}?{urlencode({'redirectTo': self.return_to})}"

    def redirect(self) -> RedirectResponse:
        return RedirectResponse(self.login_url(), status_code=302)


def _codec(request: Request) -> SessionCodec:
    return request.app.state.session_codec


def current_user_id(request: Request) -> str | None:
    """Return the user id of a valid session cookie, or None.

    A missing cookie, a bad signature and an expired token all look the same
    to the caller. Never raises.
    """
    token = request.cookies.get(get_settings().session_cookie_name)
    if not token:
        return None
    try:
        return _codec(request).decode(token).user_id
    except SessionError as exc:
        logger.debug("Ignoring session cookie on %s: %s", request.url.path, exc)
        return None


def require_user_id(request: Request) -> str | Unauthorized:
    """Return the current user id, or Unauthorized(return_to=<request path>)."""
    user_id = current_user_id(request)
    if user_id is None:
        return Unauthorized(return_to=request.url.path)
    return user_id


def create_session(request: Request, user_id: str, redirect_to: str) -> RedirectResponse:
    """Mint a session token for user_id and redirect to redirect_to with the cookie set.

    httponly=True: JS cannot read the cookie (XSS mitigation).
    samesite="lax": not sent on cross-site POST -- CSRF mitigation for forms.
    secure: only sent over HTTPS outside dev mode (Settings.cookie_secure).
    max_age: matches the token expiry so both lapse together.
    """
    settings = get_settings()
    token = _codec(request).encode({"user_id": user_id}, max_age=settings.session_max_age)
    response = RedirectResponse(redirect_to, status_code=302)
    response.set_cookie(
        settings.session_cookie_name,
        value=token,
        max_age=settings.session_max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )
    response.headers["Cache-Control"] = "no-store"
    return response


def end_session(request: Request, redirect_to: str = "/") -> RedirectResponse:
    """Expire the session cookie and redirect. Safe to call with no session."""
    settings = get_settings()
    response = RedirectResponse(redirect_to, status_code=302)
    response.delete_cookie(
        settings.session_cookie_name,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )
    return response
