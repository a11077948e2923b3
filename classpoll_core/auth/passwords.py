"""
Password hashing for ClassPoll+ accounts.

Passwords are stored as salted bcrypt hashes. Rows written before hashing
was introduced still hold the plain value; ``verify_password`` accepts them
so the login flow can upgrade them in place.
"""

import hmac

import bcrypt

BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Example:
        >>> hash_password("passer25")
        '$2b$12$...'
    """
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def is_hashed(stored: str) -> bool:
    return bool(stored) and stored.startswith(BCRYPT_PREFIXES)


def verify_password(password: str, stored: str) -> bool:
    if not stored:
        return False
    if is_hashed(stored):
        return bcrypt.checkpw(password.encode(), stored.encode())
    # Legacy plaintext row
    return hmac.compare_digest(password.encode(), stored.encode())


def needs_rehash(stored: str) -> bool:
    return not is_hashed(stored)
