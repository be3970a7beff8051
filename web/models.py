"""
web/models.py -- Response bodies for the Jokebox web routes.

These Pydantic v2 models define the form-facing transport contract. They are
intentionally separate from the dataclasses in auth/models.py and
jokes/models.py, which own the internal domain representation. Route handlers
map between the two.

Form results ("action data") use camelCase keys on the wire -- formError,
fieldErrors, loginType -- so the models declare an alias generator and are
always dumped with by_alias=True and exclude_none=True. A field that passed
validation is simply absent from fieldErrors.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from jokes.models import Joke

# ---------------------------------------------------------------------------
# Form results
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_body(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class LoginFieldErrors(_CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None


class LoginFields(_CamelModel):
    """Submitted values echoed back for re-display. The password never is."""

    login_type: str
    username: str


class LoginActionData(_CamelModel):
    """Body returned by POST /login when the submission is rejected."""

    form_error: Optional[str] = None
    field_errors: Optional[LoginFieldErrors] = None
    fields: Optional[LoginFields] = None


class JokeFieldErrors(_CamelModel):
    name: Optional[str] = None
    content: Optional[str] = None


class JokeFields(_CamelModel):
    name: str
    content: str


class JokeActionData(_CamelModel):
    """Body returned by POST /jokes/new when the submission is rejected."""

    form_error: Optional[str] = None
    field_errors: Optional[JokeFieldErrors] = None
    fields: Optional[JokeFields] = None


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------


class JokeResponse(_CamelModel):
    id: str
    name: str
    content: str
    jokester_id: str
    created_at: str

    @classmethod
    def from_joke(cls, joke: Joke) -> "JokeResponse":
        return cls(
            id=joke.id or "",
            name=joke.name,
            content=joke.content,
            jokester_id=joke.jokester_id,
            created_at=joke.created_at,
        )


class JokeListItem(_CamelModel):
    id: str
    name: str


class JokesIndexResponse(_CamelModel):
    """Body of GET /jokes: one random joke plus the newest few for navigation."""

    random_joke: JokeResponse
    joke_list_items: list[JokeListItem]
    user_id: Optional[str] = None


