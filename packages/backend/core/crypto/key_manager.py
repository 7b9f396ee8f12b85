"""
Symmetric key material for HMAC and JWT signing.
Keys are sampled from an instance-owned pool of pre-generated random bytes.

Note: the sampling scheme has not been cryptographically reviewed. Callers that need
audited key generation should pass secrets.token_bytes output to SecurityConfig directly.
"""

import logging
import random
import secrets
import threading
import uuid
from typing import Optional

from ..config import digest_size
from ..exceptions import InvalidInput, InvalidKeyFormat

logger = logging.getLogger(__name__)

POOL_SIZE = 2000
UUID_SIZE = 16


class KeyMaterial:
    """
    Key generator backed by a pool of random bytes and an index generator.

    Both the pool and the index generator are owned by the instance, so tests can
    inject a fixed pool and a seeded random.Random for deterministic keys.
    """

    def __init__(
        self,
        algorithm: str = "sha512",
        pool: Optional[bytes] = None,
        rng: Optional[random.Random] = None
    ):
        self.algorithm = algorithm
        self.key_size = digest_size(algorithm)

        if pool is None:
            pool = secrets.token_bytes(POOL_SIZE)
        if not isinstance(pool, (bytes, bytearray)) or not pool:
            raise InvalidInput("Random byte pool must be non-empty bytes")

        self._pool = bytes(pool)
        self._rng = rng or random.SystemRandom()
        # random.Random instances are not safe to share between threads
        self._lock = threading.Lock()

    def generate_key(self, target_size: Optional[int] = None) -> bytes:
        """
        Generate key bytes by sampling the random pool.

        Args:
            target_size: Number of bytes to produce, defaults to the algorithm's digest size

        Returns:
            Key bytes of exactly target_size length

        Raises:
            InvalidInput: If target_size is not a positive integer
        """
        if target_size is None:
            target_size = self.key_size

        if isinstance(target_size, bool) or not isinstance(target_size, int) or target_size <= 0:
            raise InvalidInput(f"Key size must be a positive integer, got {target_size!r}")

        with self._lock:
            indices = [self._rng.randrange(len(self._pool)) for _ in range(target_size)]

        key = bytes(self._pool[i] for i in indices)
        logger.debug(f"Generated {target_size}-byte key")
        return key

    def derive_uuid_key(self) -> bytes:
        """
        Generate key bytes and reshape them into a version 4 UUID.

        Returns:
            The 16 UUID bytes

        Raises:
            InvalidKeyFormat: If the generated key is too short for a UUID
        """
        raw = self.generate_key()
        if len(raw) < UUID_SIZE:
            raise InvalidKeyFormat(
                f"{self.algorithm} keys are {len(raw)} bytes, UUID keys need {UUID_SIZE}"
            )

        try:
            uid = uuid.UUID(bytes=raw[:UUID_SIZE], version=4)
        except ValueError as e:
            raise InvalidKeyFormat(f"Key bytes cannot form a UUID: {e}") from e

        logger.debug("Derived UUID key")
        return uid.bytes
