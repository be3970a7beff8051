"""
jokes/store.py -- SQLAlchemy-backed persistence layer for jokes.

Uses SQLAlchemy Core (not ORM) so the dataclass in jokes/models.py remains the
authoritative domain representation.

Pattern: Repository + Data Mapper. JokeStore is the repository; _row_to_joke is
the mapper. Route handlers never touch SQL directly.

Security: all queries use bound parameters. delete_joke() takes the owner id
and puts it in the WHERE clause, so even a caller that skipped the ownership
check cannot remove someone else's joke.

Usage:
    store = JokeStore()                     # Settings.database_url
    store = JokeStore("sqlite:///:memory:")
    joke_id = store.create_joke(Joke(jokester_id=uid, name="Foo", content="..."))
    store.delete_joke(joke_id, jokester_id=uid)
    store.close()
"""

import random
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Index, MetaData, String, Table, Text, func, select

from core.config import get_settings
from core.db import make_engine
from jokes.models import Joke

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_jokes = Table(
    "jokes",
    metadata,
    Column("id", String(32), primary_key=True),  # uuid4 hex
    Column("jokester_id", String(32), nullable=False),  # users.id, looked up per request
    Column("name", String(255), nullable=False),
    Column("content", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
    Index("ix_jokes_jokester_id", "jokester_id"),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class JokeStore:
    def __init__(self, db_url: Optional[str] = None) -> None:
        self.engine = make_engine(db_url or get_settings().database_url)
        metadata.create_all(self.engine)

    def create_joke(self, joke: Joke) -> str:
        """Insert a joke and return its assigned id."""
        joke_id = uuid.uuid4().hex
        with self.engine.connect() as conn:
            conn.execute(
                _jokes.insert().values(
                    id=joke_id,
                    jokester_id=joke.jokester_id,
                    name=joke.name,
                    content=joke.content,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
        return joke_id

    def get_joke(self, joke_id: str) -> Optional[Joke]:
        with self.engine.connect() as conn:
            row = conn.execute(_jokes.select().where(_jokes.c.id == joke_id)).fetchone()
        return _row_to_joke(row) if row is not None else None

    def list_jokes(self, limit: int = 5) -> list[Joke]:
        """Return the newest jokes first."""
        with self.engine.connect() as conn:
            rows = conn.execute(_jokes.select().order_by(_jokes.c.created_at.desc()).limit(limit)).fetchall()
        return [_row_to_joke(r) for r in rows]

    def count_jokes(self) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_jokes)).scalar()
        return result or 0

    def random_joke(self) -> Optional[Joke]:
        """Return one joke picked uniformly at random, or None if there are none."""
        count = self.count_jokes()
        if count == 0:
            return None
        offset = random.randrange(count)  # noqa: S311 -- not security sensitive
        with self.engine.connect() as conn:
            row = conn.execute(_jokes.select().order_by(_jokes.c.id).offset(offset).limit(1)).fetchone()
        return _row_to_joke(row) if row is not None else None

    def delete_joke(self, joke_id: str, jokester_id: str) -> bool:
        """Delete a joke owned by jokester_id.

        Both conditions must match. Returns True if a row was deleted, False
        if the joke does not exist or belongs to someone else.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _jokes.delete().where((_jokes.c.id == joke_id) & (_jokes.c.jokester_id == jokester_id))
            )
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_joke(row) -> Joke:
    return Joke(
        id=row.id,
        jokester_id=row.jokester_id,
        name=row.name,
        content=row.content,
        created_at=row.created_at,
    )
