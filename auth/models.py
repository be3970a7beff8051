"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in jokes/models.py -- dataclasses own domain shape; stores and routes do the
work.

Layer rule: no imports from api/, web/, or jokes/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered identity.

    id is an opaque string (uuid4 hex) assigned by UserStore.register().
    password_hash is only populated on records read for internal verification
    (get_by_username); the User returned from register() never carries it.
    """

    username: str
    id: str | None = None
    password_hash: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class SessionPayload:
    """The claims carried inside a session token.

    expires_at is the absolute expiry as a UTC unix timestamp.
    """

    user_id: str
    expires_at: int
