"""
Configuration for the security core.
Holds key bytes, algorithm choices, bcrypt cost and codec variant; validated once at setup.
"""

import hashlib
import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from .exceptions import InvalidInput

logger = logging.getLogger(__name__)

# JWT signing is fixed to a single scheme
JWT_ALGORITHM = "HS512"

BCRYPT_MIN_ROUNDS = 4
BCRYPT_MAX_ROUNDS = 31
DEFAULT_BCRYPT_ROUNDS = 12  # ~100-250ms per hash on current hardware

CODEC_VARIANTS = ("standard", "urlsafe", "standard_raw", "urlsafe_raw")


def digest_size(algorithm: str) -> int:
    """
    Return the digest size in bytes of a hashlib algorithm.

    Raises:
        InvalidInput: If the algorithm is unknown to hashlib or has a variable-length digest
    """
    try:
        size = hashlib.new(algorithm).digest_size
    except (ValueError, TypeError) as e:
        raise InvalidInput(f"Unsupported hash algorithm: {algorithm}") from e
    # shake_* report 0 and cannot back HMAC or a fixed-size digest
    if size <= 0:
        raise InvalidInput(f"Hash algorithm {algorithm} has no fixed digest size")
    return size


@dataclass
class SecurityConfig:
    """
    Security core configuration.

    The key is optional: a toolkit built from a config without a key generates one
    sized to the HMAC algorithm's digest.
    """
    key: Optional[bytes] = field(default=None, repr=False)
    hmac_algorithm: str = "sha512"
    digest_algorithm: str = "sha256"
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS
    codec_variant: Optional[str] = None
    access_token_ttl_minutes: int = 15

    def __post_init__(self):
        size = digest_size(self.hmac_algorithm)
        digest_size(self.digest_algorithm)

        if self.key is not None:
            if not isinstance(self.key, bytes):
                raise InvalidInput("Key must be bytes")
            if len(self.key) != size:
                raise InvalidInput(
                    f"Key length {len(self.key)} does not match {self.hmac_algorithm} digest size {size}"
                )

        if not isinstance(self.bcrypt_rounds, int) or not (
            BCRYPT_MIN_ROUNDS <= self.bcrypt_rounds <= BCRYPT_MAX_ROUNDS
        ):
            raise InvalidInput(
                f"bcrypt rounds must be between {BCRYPT_MIN_ROUNDS} and {BCRYPT_MAX_ROUNDS}"
            )

        if self.codec_variant is not None and self.codec_variant not in CODEC_VARIANTS:
            raise InvalidInput(f"Unknown codec variant: {self.codec_variant}")

        if self.access_token_ttl_minutes <= 0:
            raise InvalidInput("Access token TTL must be positive")

    @property
    def key_size(self) -> int:
        """Required key length for the configured HMAC algorithm."""
        return digest_size(self.hmac_algorithm)

    @classmethod
    def from_env(cls) -> "SecurityConfig":
        """
        Build a configuration from environment variables.

        Reads VAULT_SIGNING_KEY (hex), VAULT_HMAC_ALGORITHM, VAULT_DIGEST_ALGORITHM,
        BCRYPT_ROUNDS, VAULT_CODEC and ACCESS_TTL (minutes). Unset variables fall back
        to the dataclass defaults.

        Raises:
            InvalidInput: If a variable holds an unusable value
        """
        raw_key = os.getenv("VAULT_SIGNING_KEY")
        try:
            key = bytes.fromhex(raw_key) if raw_key else None
            rounds = int(os.getenv("BCRYPT_ROUNDS", DEFAULT_BCRYPT_ROUNDS))
            ttl = int(os.getenv("ACCESS_TTL", 15))
        except ValueError as e:
            raise InvalidInput(f"Invalid security configuration in environment: {e}") from e

        config = cls(
            key=key,
            hmac_algorithm=os.getenv("VAULT_HMAC_ALGORITHM", "sha512"),
            digest_algorithm=os.getenv("VAULT_DIGEST_ALGORITHM", "sha256"),
            bcrypt_rounds=rounds,
            codec_variant=os.getenv("VAULT_CODEC") or None,
            access_token_ttl_minutes=ttl,
        )
        logger.info(
            f"Security config loaded from environment "
            f"(hmac={config.hmac_algorithm}, rounds={config.bcrypt_rounds}, key={'set' if key else 'unset'})"
        )
        return config
