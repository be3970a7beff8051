"""Unit tests for auth/dependencies.py -- the session guard.

Requests are built directly from an ASGI scope so each test controls exactly
which cookie header arrives. The scope's "app" only needs a state carrying the
session codec, which is all the guard reads.

Covers:
- current_user_id(): no cookie, valid cookie, expired, forged, foreign secret
- require_user_id(): Unauthorized carrying the request path / the user id
- Unauthorized.redirect(): 302 to /login with redirectTo
- create_session(): redirect + cookie attributes; the cookie decodes to the user
- end_session(): expires the cookie whether or not a session existed
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from http.cookies import SimpleCookie
from types import SimpleNamespace
from urllib.parse import parse_qs, urlparse

from starlette.requests import Request

from auth.dependencies import (
    Unauthorized,
    create_session,
    current_user_id,
    end_session,
    require_user_id,
)
from auth.tokens import SessionCodec
from core.config import get_settings


def _request(codec: SessionCodec, path: str = "/jokes/new", cookie: str | None = None) -> Request:
    headers = []
    if cookie is not None:
        headers.append((b"cookie", cookie.encode("latin-1")))
    scope = {
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "server": ("testserver", 80),
        "path": path,
        "root_path": "",
        "query_string": b"",
        "headers": headers,
        "app": SimpleNamespace(state=SimpleNamespace(session_codec=codec)),
    }
    return Request(scope)


def _cookie_for(token: str) -> str:
    return f"{get_settings().session_cookie_name}={token}"


def _set_cookie(response) -> SimpleCookie:
    jar = SimpleCookie()
    for value in response.headers.getlist("set-cookie"):
        jar.load(value)
    return jar


class TestCurrentUserId:
    def test_no_cookie_is_anonymous(self, codec):
        assert current_user_id(_request(codec)) is None

    def test_valid_cookie_yields_user_id(self, codec):
        token = codec.encode({"user_id": "u-1"}, max_age=60)
        assert current_user_id(_request(codec, cookie=_cookie_for(token))) == "u-1"

    def test_expired_cookie_is_anonymous(self, codec):
        issued = datetime.now(timezone.utc) - timedelta(hours=1)
        token = codec.encode({"user_id": "u-1"}, max_age=60, now=issued)
        assert current_user_id(_request(codec, cookie=_cookie_for(token))) is None

    def test_foreign_secret_is_anonymous(self, codec):
        token = SessionCodec("f" * 40).encode({"user_id": "u-1"}, max_age=60)
        assert current_user_id(_request(codec, cookie=_cookie_for(token))) is None

    def test_garbage_cookie_is_anonymous(self, codec):
        assert current_user_id(_request(codec, cookie=_cookie_for("not-a-token"))) is None

    def test_other_cookies_are_ignored(self, codec):
        token = codec.encode({"user_id": "u-1"}, max_age=60)
        assert current_user_id(_request(codec, cookie=f"theme=dark; other={token}")) is None


class TestRequireUserId:
    def test_no_cookie_is_unauthorized_with_path(self, codec):
        result = require_user_id(_request(codec, path="/jokes/new"))
        assert result == Unauthorized(return_to="/jokes/new")

    def test_valid_cookie_returns_user_id(self, codec):
        token = codec.encode({"user_id": "u-1"}, max_age=60)
        assert require_user_id(_request(codec, cookie=_cookie_for(token))) == "u-1"

    def test_unauthorized_redirects_to_login_with_return_path(self):
        response = Unauthorized(return_to="/jokes/abc").redirect()
        assert response.status_code == 302
        location = urlparse(response.headers["location"])
        assert location.path == "/login"
        assert parse_qs(location.query) == {"redirectTo": ["/jokes/abc"]}


class TestCreateSession:
    def test_redirects_with_session_cookie(self, codec):
        response = create_session(_request(codec), "u-1", "/x")
        assert response.status_code == 302
        assert response.headers["location"] == "/x"

        settings = get_settings()
        morsel = _set_cookie(response)[settings.session_cookie_name]
        assert morsel["httponly"]
        assert morsel["samesite"].lower() == "lax"
        assert morsel["path"] == "/"
        assert int(morsel["max-age"]) == settings.session_max_age

    def test_cookie_round_trips_through_guard(self, codec):
        response = create_session(_request(codec), "u-1", "/x")
        name = get_settings().session_cookie_name
        token = _set_cookie(response)[name].value
        follow_up = _request(codec, path="/x", cookie=f"{name}={token}")
        assert current_user_id(follow_up) == "u-1"

    def test_secure_flag_follows_settings(self, codec):
        response = create_session(_request(codec), "u-1", "/x")
        settings = get_settings()
        morsel = _set_cookie(response)[settings.session_cookie_name]
        assert bool(morsel["secure"]) is settings.cookie_secure


class TestEndSession:
    def test_expires_cookie_and_redirects_home(self, codec):
        token = codec.encode({"user_id": "u-1"}, max_age=60)
        response = end_session(_request(codec, cookie=_cookie_for(token)))
        assert response.status_code == 302
        assert response.headers["location"] == "/"
        morsel = _set_cookie(response)[get_settings().session_cookie_name]
        assert morsel.value in ("", '""')
        assert int(morsel["max-age"]) == 0

    def test_without_session_is_identical(self, codec):
        with_session = end_session(_request(codec, cookie=_cookie_for(codec.encode({"user_id": "u"}, max_age=60))))
        without = end_session(_request(codec))
        name = get_settings().session_cookie_name
        first, second = _set_cookie(with_session)[name], _set_cookie(without)[name]
        assert first.value == second.value
        assert first["max-age"] == second["max-age"]
        assert first["path"] == second["path"]
        assert with_session.headers["location"] == without.headers["location"]
