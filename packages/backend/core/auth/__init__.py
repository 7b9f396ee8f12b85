"""
Authentication module for AI Vault.
Provides JWT token management and password hashing utilities.
"""

from .hashing import pwd_context, PasswordHasher, hash_password, verify_password
from .token import TokenService, issue_token, validate_token, create_access_token
from .models import Claims

__all__ = [
    "pwd_context",
    "PasswordHasher",
    "hash_password",
    "verify_password",
    "TokenService",
    "issue_token",
    "validate_token",
    "create_access_token",
    "Claims"
]
