"""
Unit tests for authentication module.
Tests JWT token issuance, validation, and password hashing.
"""

import json
import time
from datetime import timedelta

import pytest
from jose import jwt
from jose.utils import base64url_encode

from ...core.auth.hashing import PasswordHasher, hash_password, verify_password
from ...core.auth.models import Claims
from ...core.auth.token import TokenService, issue_token, validate_token, create_access_token
from ...core.exceptions import (
    AlgorithmMismatch,
    ClaimsInvalid,
    HashingFailure,
    InvalidInput,
    InvalidRecord,
    MalformedToken,
    SignatureInvalid,
    SigningFailure,
    TokenExpired,
)


class TestPasswordHashing:
    """Test password hashing functionality."""

    def test_hash_password_success(self, fast_hasher):
        """Test successful password hashing."""
        password = "test_password_123"
        hashed = fast_hasher.hash(password)

        assert hashed != password
        assert len(hashed) == 60  # bcrypt hashes are 60 characters
        assert hashed.startswith("$2b$04$")

    def test_hash_password_salted(self, fast_hasher):
        """Test the same password hashes differently each time."""
        assert fast_hasher.hash("same") != fast_hasher.hash("same")

    def test_hash_password_empty(self, fast_hasher):
        """Test hashing empty password raises error."""
        with pytest.raises(InvalidInput, match="Password cannot be empty"):
            fast_hasher.hash("")

    @pytest.mark.parametrize("cost", [3, 32, -1, "12", 4.5, True])
    def test_hash_password_cost_out_of_range(self, fast_hasher, cost):
        """Test invalid cost factors are rejected."""
        with pytest.raises(HashingFailure):
            fast_hasher.hash("password", cost)

    def test_hash_password_explicit_cost(self, fast_hasher):
        """Test the cost factor is encoded in the record."""
        assert fast_hasher.hash("password", 5).startswith("$2b$05$")

    def test_verify_password_success(self, fast_hasher):
        """Test successful password verification."""
        password = "test_password_123"
        hashed = fast_hasher.hash(password)

        assert fast_hasher.verify(password, hashed) is True
        assert fast_hasher.verify(password, hashed.encode("ascii")) is True

    def test_verify_password_failure(self, fast_hasher):
        """Test password verification with wrong password."""
        hashed = fast_hasher.hash("test_password_123")

        assert fast_hasher.verify("wrong_password", hashed) is False
        assert fast_hasher.verify("test_password_124", hashed) is False

    @pytest.mark.parametrize("record", ["not-a-hash", "$2b$04$short", "", b"\xff\xfe", None])
    def test_verify_password_malformed_record(self, fast_hasher, record):
        """Test malformed records are reported distinctly from a mismatch."""
        with pytest.raises(InvalidRecord):
            fast_hasher.verify("password", record)

    def test_bytes_password(self, fast_hasher):
        """Test bytes passwords are treated as UTF-8 text."""
        hashed = fast_hasher.hash("pässword")

        assert fast_hasher.verify("pässword".encode("utf-8"), hashed) is True
        assert fast_hasher.verify(b"other", hashed) is False
        assert fast_hasher.verify("pässword", fast_hasher.hash("pässword".encode("utf-8"))) is True

    @pytest.mark.parametrize("password", [123, None, b"\xff\xfe"])
    def test_verify_non_text_password(self, fast_hasher, password):
        """Test non-text passwords are a caller error, not a mismatch."""
        hashed = fast_hasher.hash("password")

        with pytest.raises(InvalidInput):
            fast_hasher.verify(password, hashed)

    def test_nul_byte_password(self, fast_hasher):
        """Test bcrypt's NUL byte restriction is reported as bad input."""
        with pytest.raises(InvalidInput):
            fast_hasher.hash("pass\x00word")

        with pytest.raises(InvalidInput):
            fast_hasher.verify("pass\x00word", fast_hasher.hash("password"))

    def test_needs_rehash(self, fast_hasher):
        """Test cost drift is detected."""
        old = fast_hasher.hash("password", 4)

        assert fast_hasher.needs_rehash(old) is False
        assert PasswordHasher(default_cost=5).needs_rehash(old) is True

    def test_module_helpers(self):
        """Test module-level helpers use the default hasher."""
        hashed = hash_password("module_password", cost=4)

        assert verify_password("module_password", hashed) is True
        assert verify_password("other", hashed) is False


class TestJWTTokens:
    """Test JWT token functionality."""

    def test_issue_token_format(self, token_service, signing_key, frozen_now):
        """Test issued tokens are compact HS512 JWTs."""
        token = token_service.issue({"exp": int(frozen_now) + 60}, signing_key)

        assert isinstance(token, str)
        assert len(token.split('.')) == 3  # JWT has 3 parts
        assert jwt.get_unverified_header(token) == {"alg": "HS512", "typ": "JWT"}

    def test_validate_returns_original_claims(self, token_service, signing_key, frozen_now):
        """Test a live token validates back to the issued claims."""
        claims = Claims(exp=int(frozen_now) + 3600, sub="user123", roles=["admin"], meta={"a": 1})

        token = token_service.issue(claims, signing_key)
        decoded = token_service.validate(token, signing_key)

        assert decoded.model_dump() == claims.model_dump()
        assert decoded.extra_fields() == {"sub": "user123", "roles": ["admin"], "meta": {"a": 1}}

    def test_validate_expired(self, token_service, signing_key, frozen_now):
        """Test tokens past their expiration are rejected."""
        token = token_service.issue(Claims(exp=int(frozen_now) - 10), signing_key)

        with pytest.raises(TokenExpired):
            token_service.validate(token, signing_key)

    def test_validate_expires_at_exact_time(self, signing_key):
        """Test a token is expired when now equals exp."""
        service = TokenService(clock=lambda: 1_700_000_000.0)
        token = service.issue(Claims(exp=1_700_000_000), signing_key)

        with pytest.raises(TokenExpired):
            service.validate(token, signing_key)

    def test_validate_wrong_key(self, token_service, signing_key, other_key, frozen_now):
        """Test a token signed with another key is rejected."""
        token = token_service.issue(Claims(exp=int(frozen_now) + 60), signing_key)

        with pytest.raises(SignatureInvalid):
            token_service.validate(token, other_key)

    def test_signature_tamper_detection(self, token_service, signing_key, frozen_now):
        """Test changing any signature character invalidates the token."""
        token = token_service.issue(Claims(exp=int(frozen_now) + 60), signing_key)
        head, payload, signature = token.split(".")

        for i, char in enumerate(signature):
            replacement = "A" if char != "A" else "B"
            tampered = signature[:i] + replacement + signature[i + 1:]
            with pytest.raises(SignatureInvalid):
                token_service.validate(f"{head}.{payload}.{tampered}", signing_key)

    def test_payload_tamper_detection(self, token_service, signing_key, frozen_now):
        """Test swapping the claims segment invalidates the token."""
        token = token_service.issue(Claims(exp=int(frozen_now) + 60, role="user"), signing_key)
        head, _, signature = token.split(".")
        forged = base64url_encode(
            json.dumps({"exp": int(frozen_now) + 60, "role": "admin"}).encode()
        ).decode()

        with pytest.raises(SignatureInvalid):
            token_service.validate(f"{head}.{forged}.{signature}", signing_key)

    def test_validate_rejects_other_algorithm(self, token_service, signing_key, frozen_now):
        """Test tokens signed with a different HMAC algorithm are rejected."""
        token = jwt.encode({"exp": int(frozen_now) + 60}, signing_key, algorithm="HS256")

        with pytest.raises(AlgorithmMismatch):
            token_service.validate(token, signing_key)

    def test_validate_rejects_unsigned_token(self, token_service, signing_key, frozen_now):
        """Test alg=none tokens are rejected before signature checks."""
        header = base64url_encode(json.dumps({"alg": "none", "typ": "JWT"}).encode()).decode()
        payload = base64url_encode(json.dumps({"exp": int(frozen_now) + 60}).encode()).decode()

        with pytest.raises(AlgorithmMismatch):
            token_service.validate(f"{header}.{payload}.", signing_key)

    @pytest.mark.parametrize("token", ["not-a-token", "a.b", "a.b.c", "...", 42])
    def test_validate_malformed(self, token_service, signing_key, token):
        """Test unparsable tokens are rejected."""
        with pytest.raises(MalformedToken):
            token_service.validate(token, signing_key)

    def test_validate_not_yet_valid(self, signing_key):
        """Test nbf in the future is reported as invalid claims."""
        now = int(time.time())
        service = TokenService()
        token = service.issue(Claims(exp=now + 3600, nbf=now + 1800), signing_key)

        with pytest.raises(ClaimsInvalid):
            service.validate(token, signing_key)

    def test_registered_claims_round_trip(self, token_service, signing_key, frozen_now):
        """Test typed registered claims survive issue and validate."""
        now = int(frozen_now)
        claims = Claims(exp=now + 600, sub="user123", jti="token-1", iat=now, nbf=now - 10)

        decoded = token_service.validate(token_service.issue(claims, signing_key), signing_key)

        assert decoded.sub == "user123"
        assert decoded.jti == "token-1"
        assert decoded.iat == now
        assert decoded.nbf == now - 10
        assert decoded.model_dump() == claims.model_dump()

    def test_unset_registered_claims_not_encoded(self, token_service, signing_key, frozen_now):
        """Test absent registered claims stay out of the payload."""
        token = token_service.issue(Claims(exp=int(frozen_now) + 60), signing_key)

        assert jwt.get_unverified_claims(token) == {"exp": int(frozen_now) + 60}

    @pytest.mark.parametrize("field,value", [
        ("sub", 42),
        ("iat", "yesterday"),
        ("jti", 7),
        ("nbf", "soon"),
    ])
    def test_issue_rejects_mistyped_registered_claims(self, token_service, signing_key, frozen_now, field, value):
        """Test registered claims that could never validate are refused at issue time."""
        with pytest.raises(SigningFailure):
            token_service.issue({"exp": int(frozen_now) + 600, field: value}, signing_key)

    def test_issue_requires_exp(self, token_service, signing_key):
        """Test claims without an expiration cannot be issued."""
        with pytest.raises(SigningFailure):
            token_service.issue({"sub": "user123"}, signing_key)

    def test_issue_unserializable_claims(self, token_service, signing_key, frozen_now):
        """Test serialization errors surface as signing failures."""
        with pytest.raises(SigningFailure):
            token_service.issue({"exp": int(frozen_now) + 60, "blob": object()}, signing_key)

    def test_issue_empty_key(self, token_service, frozen_now):
        """Test an empty key cannot sign."""
        with pytest.raises(SigningFailure):
            token_service.issue({"exp": int(frozen_now) + 60}, b"")

    def test_issue_access_token(self, token_service, signing_key, frozen_now):
        """Test access tokens carry subject, issue time and TTL-based expiry."""
        token = token_service.issue_access_token("user123", signing_key, timedelta(minutes=5), scope="read")
        claims = token_service.validate(token, signing_key)

        assert claims.sub == "user123"
        assert claims.iat == int(frozen_now)
        assert claims.exp == int(frozen_now) + 300
        assert claims.scope == "read"

    def test_issue_access_token_missing_subject(self, token_service, signing_key):
        """Test access token creation fails without subject."""
        with pytest.raises(SigningFailure, match="must include 'sub'"):
            token_service.issue_access_token("", signing_key)

    def test_module_helpers(self, signing_key):
        """Test module-level helpers round trip with the real clock."""
        token = issue_token(Claims.expiring_in(timedelta(minutes=1), sub="user123"), signing_key)
        assert validate_token(token, signing_key).sub == "user123"

        access = create_access_token("user456", signing_key)
        assert validate_token(access, signing_key).sub == "user456"


if __name__ == "__main__":
    pytest.main([__file__])
