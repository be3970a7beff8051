"""
web/routes.py -- Form-facing routes for Jokebox.

These routes mirror what a browser submits: url-encoded forms, redirects,
and a session cookie. Rendering is not done here -- read routes and rejected
submissions return JSON bodies that a front end re-displays.

Auth policy:
  GET  /login            -- public; authenticated users are sent to /jokes
  POST /login            -- public; login or register, then create_session()
  POST /logout           -- public; end_session() regardless of prior state
  GET  /logout           -- public; plain redirect home, cookie untouched
  GET  /jokes            -- public
  GET  /jokes/new        -- deep-linked protected page: 401 when anonymous
  POST /jokes/new        -- require_user_id(); owner stamped from the session
  GET  /jokes/{joke_id}  -- public
  POST /jokes/{joke_id}  -- require_user_id() + can_mutate() for intent=delete

Route registration order matters: /jokes/new must be registered before
/jokes/{joke_id} or FastAPI captures "new" as a path parameter.

Password hashing is CPU bound. The form handlers are async (they read the raw
form) and push every store call that hashes onto the threadpool with
run_in_threadpool so the event loop keeps serving other requests.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response
from starlette.concurrency import run_in_threadpool

from auth.dependencies import (
    Unauthorized,
    create_session,
    current_user_id,
    end_session,
    require_user_id,
)
from auth.errors import UsernameTaken
from auth.ownership import can_mutate
from auth.store import UserStore
from core.config import get_settings
from jokes.models import Joke
from jokes.store import JokeStore
from web.forms import LoginSubmission, parse_joke_form, parse_login_form
from web.models import JokeActionData, JokeListItem, JokeResponse, JokesIndexResponse, LoginActionData, LoginFields

logger = logging.getLogger("jokebox.web")

router = APIRouter()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _safe_redirect(target: Optional[str]) -> str:
    """Validate a post-login redirect target. Only accept relative paths.

    Prevents open redirects such as redirectTo=https://attacker.com or
    redirectTo=//attacker.com. Anything else falls back to the default landing
    page.
    """
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return get_settings().default_redirect


def _bad_request(data) -> JSONResponse:
    return JSONResponse(status_code=400, content=data.to_body())


def _error(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": {"code": code, "message": message}})


# ---------------------------------------------------------------------------
# Login / logout
# ---------------------------------------------------------------------------


@router.get("/login")
def login_form(request: Request) -> Response:
    """Describe the login form. Already-authenticated users are sent on."""
    if current_user_id(request) is not None:
        return RedirectResponse(get_settings().default_redirect, status_code=302)
    redirect_to = _safe_redirect(request.query_params.get("redirectTo"))
    return JSONResponse({"redirectTo": redirect_to})


@router.post("/login")
async def login_post(request: Request) -> Response:
    """Handle the combined login / register form.

    Wrong username and wrong password produce the same message; the store
    also equalizes their timing.
    """
    form = await request.form()
    parsed = parse_login_form(form, get_settings().default_redirect)
    if isinstance(parsed, LoginActionData):
        return _bad_request(parsed)

    submission: LoginSubmission = parsed
    fields = LoginFields(login_type=submission.login_type, username=submission.username)
    user_store: UserStore = request.app.state.user_store
    redirect_to = _safe_redirect(submission.redirect_to)

    if submission.login_type == "login":
        user = await run_in_threadpool(user_store.verify_credentials, submission.username, submission.password)
        if user is None:
            logger.info("Failed login for %r", submission.username)
            return _bad_request(
                LoginActionData(fields=fields, form_error="Username/password combination is incorrect.")
            )
        logger.info("User %s logged in", user.id)
        return create_session(request, user.id, redirect_to)

    if submission.login_type == "register":
        try:
            user = await run_in_threadpool(user_store.register, submission.username, submission.password)
        except UsernameTaken as exc:
            return _bad_request(LoginActionData(fields=fields, form_error=str(exc)))
        return create_session(request, user.id, redirect_to)

    return _bad_request(LoginActionData(fields=fields, form_error="Login type invalid"))


@router.post("/logout")
def logout(request: Request) -> RedirectResponse:
    """Clear the session cookie and go home. Idempotent."""
    return end_session(request, "/")


@router.get("/logout")
def logout_get() -> RedirectResponse:
    return RedirectResponse("/", status_code=302)


# ---------------------------------------------------------------------------
# Jokes
# ---------------------------------------------------------------------------


@router.get("/jokes")
def jokes_index(request: Request) -> Response:
    joke_store: JokeStore = request.app.state.joke_store
    joke = joke_store.random_joke()
    if joke is None:
        return _error(404, "not_found", "No random joke found")
    body = JokesIndexResponse(
        random_joke=JokeResponse.from_joke(joke),
        joke_list_items=[JokeListItem(id=j.id or "", name=j.name) for j in joke_store.list_jokes()],
        user_id=current_user_id(request),
    )
    return JSONResponse(body.to_body())


@router.get("/jokes/new")
def new_joke_form(request: Request) -> Response:
    """Deep-linked protected page: answer 401 directly instead of redirecting."""
    if current_user_id(request) is None:
        return _error(401, "unauthorized", "You must be logged in to create a joke")
    return JSONResponse({})


@router.post("/jokes/new")
async def new_joke(request: Request) -> Response:
    """Create a joke owned by the current session's user."""
    user_id = require_user_id(request)
    if isinstance(user_id, Unauthorized):
        return user_id.redirect()

    form = await request.form()
    parsed = parse_joke_form(form)
    if isinstance(parsed, JokeActionData):
        return _bad_request(parsed)

    joke_store: JokeStore = request.app.state.joke_store
    joke_id = joke_store.create_joke(Joke(jokester_id=user_id, name=parsed.name, content=parsed.content))
    logger.info("User %s created joke %s", user_id, joke_id)
    return RedirectResponse(f"/jokes/{joke_id}", status_code=303)


@router.get("/jokes/{joke_id}")
def joke_detail(request: Request, joke_id: str) -> Response:
    joke_store: JokeStore = request.app.state.joke_store
    joke = joke_store.get_joke(joke_id)
    if joke is None:
        return _error(404, "not_found", "What a joke! Not found.")
    return JSONResponse({"joke": JokeResponse.from_joke(joke).to_body()})


@router.post("/jokes/{joke_id}")
async def joke_action(request: Request, joke_id: str) -> Response:
    """Handle actions posted to a joke's page. Only intent=delete exists."""
    user_id = require_user_id(request)
    if isinstance(user_id, Unauthorized):
        return user_id.redirect()

    form = await request.form()
    intent = form.get("intent")
    if intent != "delete":
        return _error(400, "bad_request", f"The intent {intent} is not supported")

    joke_store: JokeStore = request.app.state.joke_store
    joke = joke_store.get_joke(joke_id)
    if joke is None:
        return _error(404, "not_found", "Can't delete what does not exist")
    if not can_mutate(joke.jokester_id, user_id):
        logger.warning("User %s tried to delete joke %s owned by %s", user_id, joke_id, joke.jokester_id)
        return _error(403, "forbidden", "Pssh, nice try. That's not your joke")

    joke_store.delete_joke(joke_id, jokester_id=user_id)
    logger.info("User %s deleted joke %s", user_id, joke_id)
    return RedirectResponse("/jokes", status_code=303)
