"""
AI Vault security core.
Password hashing, HMAC signing, file digests, base64 codecs and HS512 JWTs.
"""

from .config import SecurityConfig, JWT_ALGORITHM
from .toolkit import SecurityToolkit

__all__ = [
    "SecurityConfig",
    "SecurityToolkit",
    "JWT_ALGORITHM"
]
