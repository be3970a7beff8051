"""
web/forms.py -- Turn raw form submissions into strict records.

Every submitted value arrives untyped: a field can be missing, repeated, or an
uploaded file instead of text. parse_* functions accept only a single plain
string per field and return either a frozen submission dataclass or the
action-data body describing what was wrong. Nothing is coerced.
"""

from dataclasses import dataclass
from typing import Optional, Union

from starlette.datastructures import FormData

from auth.passwords import MAX_PASSWORD_BYTES
from web.models import (
    JokeActionData,
    JokeFieldErrors,
    JokeFields,
    LoginActionData,
    LoginFieldErrors,
    LoginFields,
)

FORM_NOT_SUBMITTED = "Form not submitted correctly."


@dataclass(frozen=True)
class LoginSubmission:
    login_type: str
    username: str
    password: str
    redirect_to: str


@dataclass(frozen=True)
class JokeSubmission:
    name: str
    content: str


def _text(form: FormData, key: str) -> Optional[str]:
    """Return the field's value if it was submitted exactly once as text."""
    values = form.getlist(key)
    if len(values) != 1 or not isinstance(values[0], str):
        return None
    return values[0]


# ---------------------------------------------------------------------------
# Field validators -- return an error message or None
# ---------------------------------------------------------------------------


def validate_username(username: str) -> Optional[str]:
    if len(username) < 3:
        return "Usernames must be at least 3 characters long"
    return None


def validate_password(password: str) -> Optional[str]:
    if len(password) < 6:
        return "Passwords must be at least 6 characters long"
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return f"Passwords must be at most {MAX_PASSWORD_BYTES} bytes long"
    return None


def validate_joke_name(name: str) -> Optional[str]:
    if len(name) < 3:
        return "That joke's name is too short"
    return None


def validate_joke_content(content: str) -> Optional[str]:
    if len(content) < 10:
        return "That joke is too short"
    return None


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


def parse_login_form(form: FormData, default_redirect: str) -> Union[LoginSubmission, LoginActionData]:
    """Validate a POST /login body.

    redirectTo is optional; every other field is required. Unknown loginType
    values pass through here and are rejected by the route, which owns the
    list of flows it can dispatch to.
    """
    login_type = _text(form, "loginType")
    username = _text(form, "username")
    password = _text(form, "password")
    raw_redirect = _text(form, "redirectTo") if "redirectTo" in form else default_redirect

    if login_type is None or username is None or password is None or raw_redirect is None:
        return LoginActionData(form_error=FORM_NOT_SUBMITTED)

    field_errors = LoginFieldErrors(
        username=validate_username(username),
        password=validate_password(password),
    )
    if field_errors.username or field_errors.password:
        return LoginActionData(
            field_errors=field_errors,
            fields=LoginFields(login_type=login_type, username=username),
        )
    return LoginSubmission(
        login_type=login_type,
        username=username,
        password=password,
        redirect_to=raw_redirect or default_redirect,
    )


def parse_joke_form(form: FormData) -> Union[JokeSubmission, JokeActionData]:
    """Validate a POST /jokes/new body."""
    name = _text(form, "name")
    content = _text(form, "content")
    if name is None or content is None:
        return JokeActionData(form_error=FORM_NOT_SUBMITTED)

    field_errors = JokeFieldErrors(
        name=validate_joke_name(name),
        content=validate_joke_content(content),
    )
    if field_errors.name or field_errors.content:
        return JokeActionData(
            field_errors=field_errors,
            fields=JokeFields(name=name, content=content),
        )
    return JokeSubmission(name=name, content=content)
