"""
tests/conftest.py -- Shared test fixtures for Jokebox tests.

This module provides:
  - make_stores(): creates isolated in-memory DBs for users + jokes
  - _patch_lifespan(): wires test stores and a codec into app.state
  - web_client: TestClient with follow_redirects=False for route tests
  - user_store / joke_store / codec: per-test unit fixtures

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

DEBUG and BCRYPT_ROUNDS must be set before any auth/core import:
get_settings() auto-generates SECRET_KEY in dev mode rather than raising, and
the minimum bcrypt work factor keeps the suite fast.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set before any auth/core import -- see module docstring.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from asgi import app
from auth.store import UserStore
from auth.tokens import SessionCodec
from core.config import get_settings
from jokes.store import JokeStore

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def make_stores(db_suffix: str) -> tuple[UserStore, JokeStore]:
    """Create isolated named shared-memory SQLite stores.

    Args:
        db_suffix: Unique string appended to the DB name so tests don't share
                   state.
    """
    url = f"sqlite:///file:test_jokebox_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=url), JokeStore(db_url=url)


def _patch_lifespan(user_store: UserStore, joke_store: JokeStore, codec: SessionCodec):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.joke_store = joke_store
        app.state.session_codec = codec
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def codec() -> SessionCodec:
    return SessionCodec(get_settings().secret_key)


@pytest.fixture
def session_cookie(codec: SessionCodec):
    """Return a helper building a cookies dict that carries a valid session."""

    def _build(user_id: str) -> dict[str, str]:
        settings = get_settings()
        token = codec.encode({"user_id": user_id}, max_age=settings.session_max_age)
        return {settings.session_cookie_name: token}

    return _build


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def joke_store() -> Generator[JokeStore, None, None]:
    store = JokeStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def web_client() -> Generator[TestClient, None, None]:
    """Yield a TestClient over fresh stores.

    follow_redirects=False is essential: tests assert on redirect locations
    and Set-Cookie headers, which vanish once the client follows a redirect.
    Cookies are passed per request, not kept on the client, so each test
    controls exactly which session a request carries.
    """
    user_store, joke_store = make_stores(uuid.uuid4().hex)
    codec = SessionCodec(get_settings().secret_key)
    app.router.lifespan_context = _patch_lifespan(user_store, joke_store, codec)

    with TestClient(app, follow_redirects=False, raise_server_exceptions=True) as client:
        yield client

    joke_store.close()
    user_store.close()
