"""
Password hashing helpers (Argon2id).

Cost parameters are fixed process-wide so every stored hash is comparable.
"""

from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError

TIME_COST = 3
MEMORY_COST = 64 * 1024  # KiB
PARALLELISM = 4

ph = PasswordHasher(time_cost=TIME_COST, memory_cost=MEMORY_COST, parallelism=PARALLELISM)


def hash_password(password: str) -> str:
    """
    Hash a plaintext password with a fresh random salt.

    Args:
        password (str): Plaintext password.

    Returns:
        str: Encoded Argon2 hash (salt and parameters included).
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check a plaintext password against a stored hash.

    Returns False on mismatch, on a hash that cannot be parsed, or when
    either argument is not a non-empty string.
    """
    if not isinstance(password, str) or not isinstance(password_hash, str):
        return False
    if not password or not password_hash:
        return False
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False
