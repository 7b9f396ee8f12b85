"""
Security toolkit facade.
Owns one SecurityConfig and one instance of each helper, so callers hold a single object
for hashing, signing, tokens and encoding.
"""

import logging
import threading
from datetime import timedelta
from typing import Any, Mapping, Optional, Union

from .auth.hashing import PasswordHasher
from .auth.models import Claims
from .auth.token import TokenService
from .config import SecurityConfig
from .crypto.codec import Codec
from .crypto.key_manager import KeyMaterial
from .crypto.signing import MessageAuthenticator

logger = logging.getLogger(__name__)


class SecurityToolkit:
    """
    Configured bundle of the security helpers.

    If the config carries no key, one is generated from KeyMaterial at construction.
    The key may be replaced later with regenerate_key(); the swap is guarded by a lock,
    and operations read the key reference once per call.
    """

    def __init__(
        self,
        config: Optional[SecurityConfig] = None,
        key_material: Optional[KeyMaterial] = None,
        token_service: Optional[TokenService] = None
    ):
        self.config = config or SecurityConfig()
        self.key_material = key_material or KeyMaterial(self.config.hmac_algorithm)
        self.hasher = PasswordHasher(self.config.bcrypt_rounds)
        self.authenticator = MessageAuthenticator(
            self.config.hmac_algorithm, self.config.digest_algorithm
        )
        self.tokens = token_service or TokenService()
        self.codec = Codec(self.config.codec_variant)

        self._lock = threading.RLock()
        self._key = self.config.key
        if self._key is None:
            self._key = self.key_material.generate_key(self.config.key_size)
            logger.info(f"Generated {len(self._key)}-byte signing key")

    @property
    def key(self) -> bytes:
        with self._lock:
            return self._key

    def regenerate_key(self) -> bytes:
        """Replace the signing key. Tokens and tags made with the old key stop verifying."""
        with self._lock:
            self._key = self.key_material.generate_key(self.config.key_size)
            logger.info("Signing key regenerated")
            return self._key

    def hash_password(self, password: str, cost: Optional[int] = None) -> str:
        return self.hasher.hash(password, cost)

    def verify_password(self, password: str, record: Union[str, bytes]) -> bool:
        return self.hasher.verify(password, record)

    def sign(self, payload: Union[bytes, str]) -> bytes:
        return self.authenticator.sign_payload(payload, self.key)

    def verify(self, payload: Union[bytes, str], tag: bytes) -> bool:
        return self.authenticator.verify_tag(payload, self.key, tag)

    def digest_file(self, path) -> bytes:
        return self.authenticator.digest_file(path)

    def issue_token(self, claims: Union[Claims, Mapping[str, Any]]) -> str:
        return self.tokens.issue(claims, self.key)

    def issue_access_token(self, subject: str, **fields: Any) -> str:
        """Issue a token for subject using the configured access token TTL."""
        ttl = timedelta(minutes=self.config.access_token_ttl_minutes)
        return self.tokens.issue_access_token(subject, self.key, ttl, **fields)

    def validate_token(self, token: str) -> Claims:
        return self.tokens.validate(token, self.key)

    def encode(self, data: Union[bytes, str], variant: Optional[str] = None) -> str:
        return self.codec.encode(data, variant)

    def decode(self, text: Union[str, bytes]) -> bytes:
        return self.codec.decode(text)
