"""
JWT token management for secure authentication.
Handles token issuance and validation with a single fixed HMAC-SHA512 scheme.
"""

from datetime import timedelta
from typing import Any, Callable, Dict, Mapping, Optional, Union
import json
import logging
import time

from jose import jwt
from jose.exceptions import JOSEError, JWTClaimsError, JWTError
from jose.utils import base64url_decode, base64url_encode
from pydantic import ValidationError

from ..config import JWT_ALGORITHM
from ..exceptions import (
    AlgorithmMismatch,
    ClaimsInvalid,
    InvalidInput,
    MalformedToken,
    SignatureInvalid,
    SigningFailure,
    TokenExpired,
)
from .models import Claims

logger = logging.getLogger(__name__)

# exp is checked here (expired at or past exp); aud is application data
_DECODE_OPTIONS = {"verify_exp": False, "verify_aud": False}


def _check_key(key: bytes) -> bytes:
    if not isinstance(key, (bytes, bytearray)) or not key:
        raise InvalidInput("Signing key must be non-empty bytes")
    return bytes(key)


def _is_canonical(segment: str) -> bool:
    """True if the base64url segment re-encodes to itself (no stray or padding bits)."""
    try:
        raw = base64url_decode(segment.encode("ascii"))
    except (ValueError, UnicodeEncodeError):
        return False
    return base64url_encode(raw).decode("ascii") == segment


def _read_header(token: str) -> Dict[str, Any]:
    """Decode the header segment without touching the signature."""
    segment = token.split(".", 1)[0]
    try:
        header = json.loads(base64url_decode(segment.encode("ascii")))
    except (ValueError, UnicodeEncodeError) as e:
        raise MalformedToken(f"Token header cannot be parsed: {e}") from e
    if not isinstance(header, dict):
        raise MalformedToken("Token header must be a JSON object")
    return header


class TokenService:
    """Stateless JWT issuer/validator. Algorithm is fixed to HS512."""

    algorithm = JWT_ALGORITHM

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock

    def issue(self, claims: Union[Claims, Mapping[str, Any]], key: bytes) -> str:
        """
        Create a signed JWT from claims.

        Args:
            claims: Claims model or mapping containing at least 'exp'
            key: HMAC signing key

        Returns:
            Compact token string header.payload.signature

        Raises:
            SigningFailure: If the claims cannot be validated, serialized or signed
        """
        try:
            key = _check_key(key)
            if not isinstance(claims, Claims):
                claims = Claims.model_validate(dict(claims))
            to_encode = claims.to_payload()
            token = jwt.encode(to_encode, key, algorithm=self.algorithm)
        except (ValidationError, JOSEError, TypeError, ValueError) as e:
            logger.error(f"Failed to sign token: {e}")
            raise SigningFailure(f"Could not sign token: {e}") from e

        logger.debug(f"Token issued (exp={claims.exp})")
        return token

    def issue_access_token(
        self,
        subject: str,
        key: bytes,
        ttl: timedelta = timedelta(minutes=15),
        **fields: Any
    ) -> str:
        """Issue a token carrying sub, iat and exp = now + ttl."""
        if not subject:
            raise SigningFailure("Token data must include 'sub' (subject)")
        now = self.clock()
        claims = Claims.expiring_in(ttl, now=now, sub=subject, iat=int(now), **fields)
        return self.issue(claims, key)

    def validate(self, token: str, key: bytes) -> Claims:
        """
        Verify a JWT and return its claims.

        Checks run in order: header parse, algorithm, signature, expiration.

        Raises:
            MalformedToken: If the token cannot be parsed
            AlgorithmMismatch: If the header declares an algorithm other than HS512
            SignatureInvalid: If the signature does not verify with key
            ClaimsInvalid: If registered claims are invalid (other than expiry)
            TokenExpired: If the current time is at or past exp
        """
        key = _check_key(key)
        if not isinstance(token, str) or token.count(".") != 2:
            raise MalformedToken("Token must have three dot-separated segments")

        header = _read_header(token)
        alg = header.get("alg")
        if alg != self.algorithm:
            logger.warning(f"Rejected token signed with unexpected algorithm: {alg}")
            raise AlgorithmMismatch(f"Expected {self.algorithm}, token declares {alg}")

        signature = token.rsplit(".", 1)[1]
        if not _is_canonical(signature):
            logger.warning("Rejected token with non-canonical signature encoding")
            raise SignatureInvalid("Signature verification failed")

        try:
            payload: Dict[str, Any] = jwt.decode(
                token, key, algorithms=[self.algorithm], options=_DECODE_OPTIONS
            )
        except JWTClaimsError as e:
            logger.warning(f"Token claims rejected: {e}")
            raise ClaimsInvalid(str(e)) from e
        except JWTError as e:
            logger.warning(f"JWT verification failed: {e}")
            raise SignatureInvalid("Signature verification failed") from e

        try:
            claims = Claims.model_validate(payload)
        except ValidationError as e:
            raise ClaimsInvalid(f"Invalid claims: {e}") from e

        if self.clock() >= claims.exp:
            logger.warning("Token has expired")
            raise TokenExpired("Token has expired")

        return claims


_default_service = TokenService()


def issue_token(claims: Union[Claims, Mapping[str, Any]], key: bytes) -> str:
    """Issue a token with the default service."""
    return _default_service.issue(claims, key)


def validate_token(token: str, key: bytes) -> Claims:
    """Validate a token with the default service."""
    return _default_service.validate(token, key)


def create_access_token(subject: str, key: bytes, ttl: Optional[timedelta] = None, **fields: Any) -> str:
    """Create an access token for subject with the default service."""
    return _default_service.issue_access_token(subject, key, ttl or timedelta(minutes=15), **fields)
