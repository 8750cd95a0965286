"""
Storefront Backend - Session Token Issuer
===========================================

What:  Signs and verifies stateless session tokens (JWT, HS256 by default).
How:   python-jose encodes the caller's payload plus `iat`/`exp` claims.
Who:   AuthService issues a token on signup and login.

Tokens are stateless: there is no server-side session store, so a token
stays valid until it expires. verify() exists for consumers that want to
check a token; no route in this service requires one.
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union

from jose import JWTError, jwt

from app.config import Settings
from app.exceptions import AuthenticationError, StorefrontError

logger = logging.getLogger(__name__)

_TTL_PATTERN = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$", re.IGNORECASE)
_TTL_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}

TTL = Union[str, int, timedelta]


def parse_ttl(ttl: TTL) -> timedelta:
    """
    Convert a token lifetime to a timedelta.

    Accepts a timedelta, integer seconds, or strings like "90s", "30m",
    "24h", "7d" (a bare number means seconds).

    >>> parse_ttl("24h")
    datetime.timedelta(days=1)
    """
    if isinstance(ttl, timedelta):
        return ttl
    if isinstance(ttl, int):
        return timedelta(seconds=ttl)
    match = _TTL_PATTERN.match(ttl)
    if not match:
        raise ValueError(f"Invalid token lifetime '{ttl}'. Use e.g. 30m, 24h, 7d")
    amount, unit = match.groups()
    return timedelta(**{_TTL_UNITS[unit.lower()]: int(amount)})


class TokenIssuer:
    def __init__(self, secret: str, algorithm: str = "HS256", default_ttl: TTL = "24h"):
        self._secret = secret
        self.algorithm = algorithm
        self.default_ttl = parse_ttl(default_ttl)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(settings.jwt_secret, settings.jwt_algorithm, settings.jwt_expires_in)

    def issue(self, payload: Dict[str, Any], ttl: Optional[TTL] = None) -> str:
        """
        Sign `payload` into a token that expires after `ttl`.

        Raises:
            StorefrontError: no signing secret is configured (500).
        """
        if not self._secret:
            raise StorefrontError(
                message="Session tokens are not configured",
                context={"missing": "JWT_SECRET"},
            )
        now = datetime.now(timezone.utc)
        lifetime = parse_ttl(ttl) if ttl is not None else self.default_ttl
        claims = dict(payload)
        claims.update({"iat": now, "exp": now + lifetime})
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Decode a token, checking signature and expiry.

        Raises:
            AuthenticationError: invalid, tampered or expired token.
        """
        try:
            return jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except JWTError as e:
            logger.info("Rejected session token: %s", str(e))
            raise AuthenticationError(message="Invalid or expired token")
