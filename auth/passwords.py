"""
auth/passwords.py -- Password hashing (bcrypt -- direct usage, no passlib wrapper).

Using bcrypt directly rather than passlib[bcrypt] because passlib's internal
wrap-bug detection creates a password longer than 72 bytes, which bcrypt 4.x
rejects with an explicit error.

bcrypt only considers the first 72 bytes of input and current releases refuse
longer values outright. hash_password() raises ValueError for those; the login
form rejects them earlier with a field error.

Layer rule: no imports from api/, web/, or jokes/. Import from core/ is allowed.
"""

from __future__ import annotations

import bcrypt

from core.config import get_settings

MAX_PASSWORD_BYTES = 72


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Every call draws a fresh salt, so hashing the same password twice yields
    two different strings.
    """
    if not plain:
        raise ValueError("Password must not be empty.")
    raw = plain.encode("utf-8")
    if len(raw) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")
    salt = bcrypt.gensalt(rounds=get_settings().bcrypt_rounds)
    return bcrypt.hashpw(raw, salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    Never raises: empty input, a malformed hash or any bcrypt error is a
    plain mismatch.
    """
    if not plain or not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except Exception:
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones. verify_credentials() checks against it when the
# username does not exist so unknown users cost the same as wrong passwords.
DUMMY_HASH: str = hash_password("jokebox_timing_dummy")
