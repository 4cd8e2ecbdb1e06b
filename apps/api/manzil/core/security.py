"""Password hashing and opaque token helpers."""
from __future__ import annotations

import hashlib
import hmac
from secrets import token_hex, token_urlsafe

PBKDF2_ITERATIONS = 390_000
_SCHEME = "pbkdf2_sha256"


def hash_password(password: str, *, salt: str | None = None) -> str:
    """Return an encoded PBKDF2 hash in ``scheme$iterations$salt$digest`` form."""

    salt = salt or token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), PBKDF2_ITERATIONS)
    return f"{_SCHEME}${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        scheme, iterations, salt, expected = encoded.split("$", 3)
    except ValueError:
        return False
    if scheme != _SCHEME:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), int(iterations))
    return hmac.compare_digest(digest.hex(), expected)


def new_token() -> str:
    """Produce an opaque bearer token."""

    return token_urlsafe(32)
