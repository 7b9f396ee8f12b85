"""
Pydantic models for signed token claims.
"""

from datetime import timedelta
from typing import Any, Dict, Optional
import time

from pydantic import BaseModel, ConfigDict, Field

# Registered claims that are left out of the payload when unset
_OPTIONAL_REGISTERED = ("sub", "jti", "iat", "nbf")


class Claims(BaseModel):
    """
    Token claims.

    Only the expiration is required. Registered claims that validators type-check
    (sub, jti, iat, nbf) are typed here so bad values fail at issue time; any
    other application fields pass through opaquely and come back unchanged.
    """
    model_config = ConfigDict(extra="allow")

    exp: int = Field(..., description="Expiration time, seconds since epoch")
    sub: Optional[str] = None
    jti: Optional[str] = None
    iat: Optional[int] = None
    nbf: Optional[int] = None

    @classmethod
    def expiring_in(cls, ttl: timedelta, now: Optional[float] = None, **fields: Any) -> "Claims":
        """Build claims that expire ttl from now."""
        now = time.time() if now is None else now
        return cls(exp=int(now + ttl.total_seconds()), **fields)

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready claims dict, without unset registered claims."""
        payload = self.model_dump()
        for name in _OPTIONAL_REGISTERED:
            if payload.get(name) is None:
                payload.pop(name, None)
        return payload

    def extra_fields(self) -> Dict[str, Any]:
        """Every claim except exp."""
        payload = self.to_payload()
        payload.pop("exp")
        return payload
