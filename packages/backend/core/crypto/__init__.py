"""
Symmetric crypto helpers for AI Vault.
Key material generation, HMAC tags, file digests and base64 text encoding.
"""

from .key_manager import KeyMaterial
from .signing import MessageAuthenticator
from .codec import Codec

__all__ = [
    "KeyMaterial",
    "MessageAuthenticator",
    "Codec"
]
