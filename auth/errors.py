"""
auth/errors.py -- Exceptions raised by the auth layer.

UsernameTaken is the Conflict case of registration. The SessionError family is
raised by SessionCodec.decode(); the session guard catches all of them and
degrades to "anonymous", so they never reach a route handler.
"""

from __future__ import annotations


class UsernameTaken(Exception):
    """Registration attempted with a username that already exists."""

    def __init__(self, username: str) -> None:
        super().__init__(f"User with username {username} already exists")
        self.username = username


class SessionError(Exception):
    """Base class for session tokens that must not be trusted."""


class SessionInvalid(SessionError):
    """Signature mismatch, wrong secret, malformed token or missing claims."""


class SessionExpired(SessionError):
    """Signature is valid but the token is past its expiry."""
