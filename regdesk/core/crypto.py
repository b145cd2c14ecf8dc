"""bcrypt helpers for admin account credentials."""

from __future__ import annotations

import bcrypt

DEFAULT_ROUNDS = 12


def _encode(value: str) -> bytes:
    return value.encode("utf-8")


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a login attempt; malformed stored hashes never match."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(_encode(plain_password), _encode(hashed_password))
    except ValueError:
        return False


def hash_rounds(hashed_password: str) -> int | None:
    """Return the cost factor of a ``$2b$NN$...`` hash, or None when unreadable."""
    parts = hashed_password.split("$")
    if len(parts) != 4 or not parts[2].isdigit():
        return None
    return int(parts[2])


def needs_rehash(hashed_password: str, rounds: int) -> bool:
    return hash_rounds(hashed_password) != rounds


__all__ = ["DEFAULT_ROUNDS", "hash_password", "hash_rounds", "needs_rehash", "verify_password"]
