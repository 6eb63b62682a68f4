"""
Password hashing and verification using bcrypt.

Only the resulting hash is ever persisted.
"""

from typing import Optional

import bcrypt

from regserver.core.config import settings


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """
    Hash a plaintext password with a fresh bcrypt salt.

    Args:
        password: Plaintext password to hash
        rounds: bcrypt cost factor (defaults to settings.BCRYPT_ROUNDS)

    Returns:
        Hashed password string
    """
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    # bcrypt only looks at the first 72 bytes and rejects longer input
    return bcrypt.hashpw(password.encode("utf-8")[:72], salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plaintext password against a bcrypt hash.

    Returns:
        True if the password matches, False otherwise
    """
    if plain_password is None or hashed_password is None:
        return False

    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8")[:72],
            hashed_password.encode("utf-8")
        )
    except ValueError:
        # Malformed hash
        return False
