"""Password and refresh-token hashing (bcrypt)."""

import hashlib
from functools import lru_cache

import bcrypt

from streamgate.core.config import settings

# Min/max lengths for registration input validation.
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 50
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72


def _rounds() -> int:
    return settings.BCRYPT_ROUNDS


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=_rounds())).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """Verify a plain password against a stored hash. Malformed hashes never match."""
    if not plain_password or not hashed:
        return False
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def _token_digest(token: str) -> bytes:
    # JWTs are far longer than 72 bytes and share their header prefix, so
    # bcrypt is fed a fixed-size digest of the whole token instead.
    return hashlib.sha256(token.encode("utf-8")).hexdigest().encode("ascii")


def hash_refresh_token(token: str) -> str:
    """Hash a refresh token for storage on the user row."""
    return bcrypt.hashpw(_token_digest(token), bcrypt.gensalt(rounds=_rounds())).decode("utf-8")


def verify_refresh_token(token: str, hashed: str | None) -> bool:
    """Check a presented refresh token against the stored hash."""
    if not token or not hashed:
        return False
    try:
        return bcrypt.checkpw(_token_digest(token), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache
def dummy_password_hash() -> str:
    """Hash checked against when a login email is unknown, so both failures cost the same."""
    return hash_password("streamgate-dummy-password")
