"""
Password hashing utilities using bcrypt for secure password storage.
Implements best practices with configurable rounds for performance tuning.
"""

from typing import Optional, Union
import logging

from passlib.context import CryptContext
from passlib.exc import PasswordValueError

from ..config import BCRYPT_MAX_ROUNDS, BCRYPT_MIN_ROUNDS, DEFAULT_BCRYPT_ROUNDS
from ..exceptions import HashingFailure, InvalidInput, InvalidRecord

logger = logging.getLogger(__name__)

# Configure bcrypt with 12 rounds (recommended for ~100ms hashing time)
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=DEFAULT_BCRYPT_ROUNDS
)


class PasswordHasher:
    """bcrypt password hasher with a per-call cost factor."""

    def __init__(self, default_cost: int = DEFAULT_BCRYPT_ROUNDS, context: CryptContext = pwd_context):
        self._check_cost(default_cost)
        self.default_cost = default_cost
        self.context = context

    @staticmethod
    def _check_cost(cost: int) -> None:
        if isinstance(cost, bool) or not isinstance(cost, int) or not (
            BCRYPT_MIN_ROUNDS <= cost <= BCRYPT_MAX_ROUNDS
        ):
            raise HashingFailure(
                f"bcrypt cost must be an integer between {BCRYPT_MIN_ROUNDS} and {BCRYPT_MAX_ROUNDS}, got {cost!r}"
            )

    @staticmethod
    def _as_record(record: Union[str, bytes]) -> str:
        if isinstance(record, bytes):
            try:
                return record.decode("ascii")
            except UnicodeDecodeError as e:
                raise InvalidRecord("Password record is not ASCII") from e
        if not isinstance(record, str) or not record:
            raise InvalidRecord("Password record must be a non-empty string")
        return record

    @staticmethod
    def _as_secret(password: Union[str, bytes]) -> str:
        if isinstance(password, bytes):
            try:
                return password.decode("utf-8")
            except UnicodeDecodeError as e:
                raise InvalidInput("Password bytes must be UTF-8") from e
        if not isinstance(password, str):
            raise InvalidInput(f"Password must be str or bytes, got {type(password).__name__}")
        return password

    def hash(self, password: Union[str, bytes], cost: Optional[int] = None) -> str:
        """
        Hash a plain text password using bcrypt.

        Args:
            password: Plain text password to hash (bytes are UTF-8 decoded)
            cost: bcrypt work factor (4-31), defaults to the hasher's cost

        Returns:
            Standard bcrypt hash string ($2b$...)

        Raises:
            InvalidInput: If password is empty, not text or rejected by bcrypt (NUL bytes)
            HashingFailure: If cost is out of range or the bcrypt backend fails
        """
        password = self._as_secret(password)
        if not password:
            raise InvalidInput("Password cannot be empty")

        cost = self.default_cost if cost is None else cost
        self._check_cost(cost)

        try:
            hashed = self.context.handler("bcrypt").using(rounds=cost).hash(password)
        except PasswordValueError as e:
            raise InvalidInput(f"Password rejected: {e}") from e
        except (ValueError, TypeError, RuntimeError) as e:
            logger.error(f"Password hashing failed: {e}")
            raise HashingFailure(f"Password hashing failed: {e}") from e

        logger.debug(f"Password hashed successfully (cost={cost})")
        return hashed

    def verify(self, password: Union[str, bytes], record: Union[str, bytes]) -> bool:
        """
        Verify a plain text password against its hash.

        Args:
            password: Plain text password to verify (bytes are UTF-8 decoded)
            record: Stored bcrypt hash

        Returns:
            True if password matches, False otherwise

        Raises:
            InvalidInput: If password is not text or is rejected by bcrypt (NUL bytes)
            InvalidRecord: If the stored hash is not a well-formed bcrypt hash
        """
        record = self._as_record(record)
        password = self._as_secret(password)

        if self.context.identify(record) != "bcrypt":
            raise InvalidRecord("Password record is not a bcrypt hash")

        try:
            result = self.context.verify(password, record)
        except PasswordValueError as e:
            raise InvalidInput(f"Password rejected: {e}") from e
        except ValueError as e:
            logger.error(f"Password verification failed: {e}")
            raise InvalidRecord(f"Malformed bcrypt hash: {e}") from e

        logger.debug(f"Password verification result: {result}")
        return result

    def needs_rehash(self, record: Union[str, bytes]) -> bool:
        """Return True if the record was hashed with a cost other than the default."""
        record = self._as_record(record)
        try:
            parsed = self.context.handler("bcrypt").from_string(record)
        except ValueError as e:
            raise InvalidRecord(f"Malformed bcrypt hash: {e}") from e
        return parsed.rounds != self.default_cost


_default_hasher = PasswordHasher()


def hash_password(password: Union[str, bytes], cost: Optional[int] = None) -> str:
    """Hash password with the default hasher."""
    return _default_hasher.hash(password, cost)


def verify_password(plain_password: Union[str, bytes], hashed_password: Union[str, bytes]) -> bool:
    """Verify password with the default hasher."""
    return _default_hasher.verify(plain_password, hashed_password)
