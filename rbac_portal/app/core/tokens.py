"""
Session and reset tokens.

Session tokens are stateless HS256 JWTs: verifying one needs only the
signing secret and the claims. Reset tokens are opaque random strings;
only their SHA-256 digest is persisted.
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import jwt
from jose.exceptions import JOSEError

from rbac_portal.app.core.config import Settings

RESET_TOKEN_BYTES = 32  # 256 bits of entropy

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenError(Exception):
    """Session token could not be accepted. Callers treat every subtype as unauthenticated."""


class MalformedToken(TokenError):
    pass


class InvalidSignature(TokenError):
    pass


class ExpiredToken(TokenError):
    pass


@dataclass(frozen=True)
class TokenClaims:
    """Decoded session token claims."""

    sub: str
    exp: int
    iat: int
    email: Optional[str] = None


class TokenService:
    """Issues and verifies session tokens.

    Args:
        settings: Supplies the signing secret, algorithm and token lifetime.
        clock: Source of "now"; injectable so expiry can be tested exactly.
    """

    def __init__(self, settings: Settings, clock: Clock = utcnow):
        self._secret = settings.jwt_secret_key
        self._algorithm = settings.jwt_algorithm
        self._lifetime = timedelta(minutes=settings.access_token_expire_minutes)
        self._clock = clock

    def issue(self, principal_id: str, email: Optional[str] = None) -> str:
        """Sign a token for the principal, valid for the configured lifetime."""
        now = self._clock()
        claims = {
            "sub": str(principal_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self._lifetime).timestamp()),
        }
        if email:
            claims["email"] = email
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Decode and validate a token.

        Raises:
            MalformedToken: the string is not a decodable JWT or lacks required claims.
            InvalidSignature: the signature (or algorithm) does not match the server secret.
            ExpiredToken: the current time is past the embedded expiry.
        """
        try:
            jwt.get_unverified_claims(token)
        except JOSEError:
            raise MalformedToken("Token could not be decoded") from None

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JOSEError:
            raise InvalidSignature("Token signature is invalid") from None

        sub, exp, iat = payload.get("sub"), payload.get("exp"), payload.get("iat")
        if not isinstance(sub, str) or not sub or not isinstance(exp, int) or not isinstance(iat, int):
            raise MalformedToken("Token is missing required claims")

        if self._clock().timestamp() >= exp:
            raise ExpiredToken("Token has expired")

        return TokenClaims(sub=sub, exp=exp, iat=iat, email=payload.get("email"))


def generate_reset_token() -> str:
    """Generate a URL-safe password reset token."""
    return secrets.token_urlsafe(RESET_TOKEN_BYTES)


def hash_token(token: str) -> str:
    """SHA-256 digest used to store and look up reset tokens.

    The token carries enough entropy that an unsalted fast hash is sufficient.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
