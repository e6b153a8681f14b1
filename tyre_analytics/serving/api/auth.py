"""
Admin Authentication

The storefront issues the tokens; this service only verifies them. Analytics
routes require an HS256 bearer JWT whose `role` claim is the admin role.
"""

from typing import Any, Dict, Optional

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from tyre_analytics.config import get_settings

logger = structlog.get_logger(__name__)

security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry; raises JWTError on any failure."""
    settings = get_settings().security
    return jwt.decode(
        token,
        settings.jwt_secret_key.get_secret_value(),
        algorithms=[settings.jwt_algorithm],
    )


def create_access_token(claims: Dict[str, Any]) -> str:
    """Sign claims with the configured key (tooling and tests)."""
    settings = get_settings().security
    return jwt.encode(claims, settings.jwt_secret_key.get_secret_value(), algorithm=settings.jwt_algorithm)


async def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Dict[str, Any]:
    """Return the token claims of an authenticated admin."""
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise unauthorized

    try:
        claims = decode_token(credentials.credentials)
    except JWTError as e:
        logger.info("Rejected bearer token", error=str(e))
        raise unauthorized from e

    if claims.get("role") != get_settings().security.admin_role:
        logger.warning("Non-admin access to analytics", subject=claims.get("sub"), role=claims.get("role"))
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )

    return claims
