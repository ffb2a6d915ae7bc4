"""
Password hashing via argon2-cffi (Argon2id).

The work factor is tunable through app config (ARGON2_TIME_COST,
ARGON2_MEMORY_COST); see configure_hasher().
"""
from __future__ import annotations

import logging

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

logger = logging.getLogger(__name__)

ph = PasswordHasher()


def configure_hasher(time_cost: int | None = None, memory_cost: int | None = None) -> PasswordHasher:
    """Rebuild the module hasher with a different work factor."""
    global ph
    kwargs = {}
    if time_cost:
        kwargs["time_cost"] = int(time_cost)
    if memory_cost:
        kwargs["memory_cost"] = int(memory_cost)
    ph = PasswordHasher(**kwargs)
    return ph


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a plaintext password against a stored hash.
    False on mismatch and on a corrupted or foreign hash.
    """
    if not password_hash or password is None:
        return False
    try:
        return ph.verify(password_hash, password)
    except VerificationError:
        return False
    except InvalidHashError:
        logger.warning("Stored password hash could not be parsed")
        return False


def needs_rehash(password_hash: str) -> bool:
    try:
        return ph.check_needs_rehash(password_hash)
    except InvalidHashError:
        return False
