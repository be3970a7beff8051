"""
auth/tokens.py -- Signed, self-contained session tokens.

Security design decisions:
  Format: python-jose JWT with HS256. The token carries the user id and an
       absolute expiry ("exp"); the HMAC-SHA256 tag over header and claims is
       appended, so the whole thing is one opaque, cookie-safe string. No
       server-side session table exists -- forging a session requires the
       secret.

  Verification order: the signature is checked first (constant-time compare
       inside jose) and only then the expiry. A tampered token therefore
       always reports SessionInvalid, never SessionExpired.

  Secret: injected at construction. The codec never reads settings or
       globals itself, so tests can build codecs with distinct secrets. The
       application builds one codec at startup from Settings.secret_key and
       stores it on app.state; it is read-only for the process lifetime.

Layer rule: no imports from api/, web/, or jokes/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from auth.errors import SessionExpired, SessionInvalid
from auth.models import SessionPayload

_ALGORITHM = "HS256"


class SessionCodec:
    """Encode and decode session tokens with a fixed secret.

    Usage:
        codec = SessionCodec(settings.secret_key)
        token = codec.encode({"user_id": user.id}, max_age=3600)
        payload = codec.decode(token)   # SessionPayload, or raises SessionError
    """

    def __init__(self, secret: str, algorithm: str = _ALGORITHM) -> None:
        if not secret:
            raise ValueError("Session secret must not be empty.")
        self._secret = secret
        self._algorithm = algorithm

    def encode(self, payload: dict, max_age: int, *, now: datetime | None = None) -> str:
        """Serialize payload plus an absolute expiry and sign it.

        Args:
            payload: Must contain a non-empty "user_id" string.
            max_age: Lifetime in seconds, counted from now.
            now:     Issue time; defaults to the current UTC time.
        """
        user_id = payload.get("user_id")
        if not isinstance(user_id, str) or not user_id:
            raise ValueError("Session payload requires a non-empty user_id.")
        if max_age <= 0:
            raise ValueError("max_age must be a positive number of seconds.")
        issued = now or datetime.now(timezone.utc)
        claims = {
            "user_id": user_id,
            "exp": int(issued.timestamp()) + max_age,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> SessionPayload:
        """Verify a token and return its payload.

        Raises SessionInvalid on a bad signature, a different secret, a
        malformed token or missing claims; SessionExpired when the signature
        holds but the expiry has passed.
        """
        if not token:
            raise SessionInvalid("Empty session token.")
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require_exp": True},
            )
        except ExpiredSignatureError as exc:
            raise SessionExpired(str(exc)) from exc
        except JWTError as exc:
            raise SessionInvalid(str(exc)) from exc

        user_id = claims.get("user_id")
        expires_at = claims.get("exp")
        if not isinstance(user_id, str) or not user_id or not isinstance(expires_at, int):
            raise SessionInvalid("Session token is missing required claims.")
        return SessionPayload(user_id=user_id, expires_at=expires_at)
