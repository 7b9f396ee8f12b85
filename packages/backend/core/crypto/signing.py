"""
HMAC message authentication and file content digests.
"""

import hashlib
import hmac
import logging
from typing import Union

from ..config import digest_size
from ..exceptions import FileAccessError, InvalidInput

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

Payload = Union[bytes, bytearray, str]


def _as_bytes(payload: Payload) -> bytes:
    if isinstance(payload, str):
        return payload.encode("utf-8")
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    raise InvalidInput(f"Payload must be bytes or str, got {type(payload).__name__}")


class MessageAuthenticator:
    """HMAC signer/verifier plus unkeyed file digests."""

    def __init__(self, algorithm: str = "sha512", digest_algorithm: str = "sha256"):
        # Fail early on algorithm names hashlib does not know
        digest_size(algorithm)
        digest_size(digest_algorithm)
        self.algorithm = algorithm
        self.digest_algorithm = digest_algorithm

    def sign_payload(self, payload: Payload, key: bytes) -> bytes:
        """
        Compute the HMAC tag of a payload.

        Args:
            payload: Bytes to authenticate (str is UTF-8 encoded)
            key: Shared secret key

        Returns:
            Raw HMAC digest bytes

        Raises:
            InvalidInput: If the key is empty or not bytes
        """
        if not isinstance(key, (bytes, bytearray)) or not key:
            raise InvalidInput("HMAC key must be non-empty bytes")

        tag = hmac.new(bytes(key), _as_bytes(payload), self.algorithm).digest()
        logger.debug(f"Signed {len(payload)}-byte payload with HMAC-{self.algorithm}")
        return tag

    def verify_tag(self, payload: Payload, key: bytes, expected_tag: bytes) -> bool:
        """
        Check a received HMAC tag against a freshly computed one.

        Comparison is constant time. A tag of the wrong type or length is a mismatch,
        not an error.

        Returns:
            True if the tag is authentic, False otherwise
        """
        if not isinstance(expected_tag, (bytes, bytearray)):
            logger.warning("HMAC verification failed: tag is not bytes")
            return False

        actual_tag = self.sign_payload(payload, key)
        result = hmac.compare_digest(actual_tag, bytes(expected_tag))
        if not result:
            logger.warning("HMAC verification failed: tag mismatch")
        return result

    def digest_file(self, path) -> bytes:
        """
        Stream a file through the configured unkeyed hash.

        Args:
            path: File path (str or os.PathLike)

        Returns:
            Raw digest bytes

        Raises:
            FileAccessError: If the file cannot be opened or read
        """
        hasher = hashlib.new(self.digest_algorithm)
        try:
            with open(path, "rb") as f:
                for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                    hasher.update(chunk)
        except OSError as e:
            logger.error(f"Failed to digest file {path}: {e}")
            raise FileAccessError(e.errno, f"Cannot read {path}: {e.strerror or e}") from e

        logger.debug(f"Computed {self.digest_algorithm} digest of {path}")
        return hasher.digest()

    def verify_file(self, path, expected_digest: bytes) -> bool:
        """Compare a file's digest with an expected value in constant time."""
        if not isinstance(expected_digest, (bytes, bytearray)):
            return False
        return hmac.compare_digest(self.digest_file(path), bytes(expected_digest))
