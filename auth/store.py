"""
auth/store.py -- SQLAlchemy Core persistence layer for user credentials.

Pattern: Repository + Data Mapper (same as jokes/store.py).
UserStore is the repository; _row_to_user is the mapper.
Route and dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  Username uniqueness is a UNIQUE constraint on the table, not a
  check-then-insert in Python. Two concurrent registrations for the same name
  both reach the INSERT; the database lets exactly one through and the other
  surfaces as IntegrityError, which register() converts to UsernameTaken.

Layer rule: no imports from api/, web/, or jokes/.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, MetaData, String, Table, Text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.errors import UsernameTaken
from auth.models import User
from auth.passwords import DUMMY_HASH, hash_password, verify_password
from core.config import get_settings
from core.db import make_engine

logger = logging.getLogger("jokebox.auth")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(32), primary_key=True),  # uuid4 hex
    Column("username", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User records and the credential checks built on them.

    Usage:
        store = UserStore()
        user = store.register("alice", "secret1")
        same = store.verify_credentials("alice", "secret1")
        store.close()
    """

    def __init__(self, db_url: str | None = None) -> None:
        self.engine: Engine = make_engine(db_url or get_settings().database_url)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def register(self, username: str, password: str) -> User:
        """Create a user with a freshly hashed password.

        Raises UsernameTaken if the exact (case-sensitive) username already
        exists, including when a concurrent request inserted it first.
        The returned User never carries the password hash.
        """
        user = User(
            id=uuid.uuid4().hex,
            username=username,
            created_at=_now_iso(),
        )
        password_hash = hash_password(password)
        try:
            with self.engine.connect() as conn:
                conn.execute(
                    _users.insert().values(
                        id=user.id,
                        username=user.username,
                        password_hash=password_hash,
                        created_at=user.created_at,
                    )
                )
                conn.commit()
        except IntegrityError as exc:
            raise UsernameTaken(username) from exc
        logger.info("Registered user %s (%s)", user.username, user.id)
        return user

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_username(self, username: str) -> User | None:
        """Look up a user by exact username (case-sensitive), hash included."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.username == username)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: str) -> User | None:
        """Look up a user by id. The hash is not included."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        if row is None:
            return None
        user = _row_to_user(row)
        user.password_hash = None
        return user

    def verify_credentials(self, username: str, password: str) -> User | None:
        """Authenticate a username/password pair with timing equalization.

        Always runs bcrypt whether or not the user exists, so an unknown
        username and a wrong password look the same from outside -- both in
        the return value and in response time.

        Returns the User (without its hash) on success, None on any failure.
        """
        user = self.get_by_username(username)
        if user is None:
            # Equalize timing -- do NOT return early before running bcrypt.
            verify_password(password, DUMMY_HASH)
            return None
        if not verify_password(password, user.password_hash or ""):
            return None
        user.password_hash = None
        return user

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        username=row.username,
        password_hash=row.password_hash,
        created_at=row.created_at,
    )
