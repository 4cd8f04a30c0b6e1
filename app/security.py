"""Bearer-token authorization shared by every mutating route."""
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from domain.errors import AuthenticationError, AuthorizationError
from domain.user import Role
from infrastructure.config import get_settings
from infrastructure.security import JwtTokenIssuer, TokenClaims


bearer_scheme = HTTPBearer(auto_error=False)


def get_token_issuer() -> JwtTokenIssuer:
    return JwtTokenIssuer.from_settings(get_settings())


def require_roles(*roles: Role):
    """Build a dependency that admits only bearer tokens carrying one of ``roles``."""
    allowed = frozenset(Role(role).value for role in roles)

    async def dependency(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    ) -> TokenClaims:
        if credentials is None:
            raise AuthenticationError("Missing bearer token")
        claims = get_token_issuer().decode(credentials.credentials)
        if claims.role not in allowed:
            raise AuthorizationError(f"Role '{claims.role}' may not perform this action")
        return claims

    return dependency


require_staff = require_roles(Role.VENDOR, Role.ADMIN)
