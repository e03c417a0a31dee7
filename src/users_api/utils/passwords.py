"""Password hashing (bcrypt).

Digests are standard ``$2b$`` bcrypt strings with the salt embedded, so any
bcrypt implementation can verify them against the original plaintext.

Bcrypt only reads the first 72 bytes of its input. Current bcrypt releases
raise on anything longer, so the input is cut to 72 bytes here, which yields
the same digests other bcrypt implementations produce for long passwords.
"""

from typing import Optional

import bcrypt
from fastapi.concurrency import run_in_threadpool

from users_api.config import settings

BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    """UTF-8 encode, truncated to bcrypt's 72-byte input limit."""
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    """Return bcrypt hash of password."""
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(_encode(password), salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if plain_password matches hashed_password."""
    try:
        return bool(bcrypt.checkpw(_encode(plain_password), hashed_password.encode("utf-8")))
    except (ValueError, TypeError):
        return False


async def hash_password(password: str) -> str:
    """Hash on a worker thread so the event loop keeps serving requests."""
    return await run_in_threadpool(get_password_hash, password)
