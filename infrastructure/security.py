"""Password hashing and bearer token issuance."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from domain.errors import AuthenticationError, ConfigurationError
from domain.order import utcnow
from infrastructure.config import Settings


class Argon2PasswordHasher:
    def __init__(self, hasher: Optional[PasswordHasher] = None):
        self._hasher = hasher or PasswordHasher()

    def hash(self, password: str) -> str:
        return self._hasher.hash(password)

    def verify(self, password_hash: str, password: str) -> bool:
        try:
            return self._hasher.verify(password_hash, password)
        except (VerificationError, InvalidHashError):
            return False


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    role: str


class JwtTokenIssuer:
    """HS256 bearer tokens carrying the user id (``sub``) and role."""

    algorithm = "HS256"

    def __init__(self, secret: str, expires_in: timedelta = timedelta(days=7)):
        if not secret:
            raise ConfigurationError("Server misconfiguration")
        self.secret = secret
        self.expires_in = expires_in

    @classmethod
    def from_settings(cls, settings: Settings) -> "JwtTokenIssuer":
        return cls(secret=settings.jwt_secret, expires_in=settings.jwt_expires_in)

    def issue(self, user_id: str, role: str, now: Optional[datetime] = None) -> str:
        now = now or utcnow()
        payload = {"sub": user_id, "role": role, "iat": now, "exp": now + self.expires_in}
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.InvalidTokenError as exc:
            raise AuthenticationError("Invalid or expired token") from exc

        user_id = payload.get("sub")
        role = payload.get("role")
        if not user_id or not role:
            raise AuthenticationError("Invalid or expired token")
        return TokenClaims(user_id=user_id, role=role)
