"""
Shared fixtures for security core unit tests.
"""

import hashlib
import random
import time

import pytest

from ...core.auth.hashing import PasswordHasher
from ...core.auth.token import TokenService
from ...core.crypto.key_manager import KeyMaterial


@pytest.fixture
def signing_key():
    """Deterministic 64-byte HS512 key."""
    return hashlib.sha512(b"ai-vault-test-signing-key").digest()


@pytest.fixture
def other_key():
    return hashlib.sha512(b"ai-vault-other-key").digest()


@pytest.fixture
def fast_hasher():
    """bcrypt hasher at minimum cost to keep tests quick."""
    return PasswordHasher(default_cost=4)


@pytest.fixture
def frozen_now():
    return float(int(time.time()))


@pytest.fixture
def token_service(frozen_now):
    """Token service with a frozen clock."""
    return TokenService(clock=lambda: frozen_now)


@pytest.fixture
def seeded_key_material():
    """Key material with a fixed pool and seeded index generator."""
    pool = bytes(range(256)) * 8
    return KeyMaterial("sha512", pool=pool, rng=random.Random(1234))
