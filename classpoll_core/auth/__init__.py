"""
Authentication module for ClassPoll+.

Accounts are rows of the Supabase ``users`` table; passwords are stored as
bcrypt hashes and checked client-side against the loaded cache. Row Level
Security on the Supabase project is what actually protects the data.
"""

from .authentication import (
    AuthService,
    LOGIN_FAILED_MESSAGE,
    check_authentication,
    check_admin_access,
)
from .passwords import (
    hash_password,
    verify_password,
)

__all__ = [
    "AuthService",
    "LOGIN_FAILED_MESSAGE",
    "check_authentication",
    "check_admin_access",
    "hash_password",
    "verify_password",
]
