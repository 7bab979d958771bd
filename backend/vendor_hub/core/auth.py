"""
Authentication — Supabase session token verification for route protection.

Admin sessions are issued by Supabase Auth; their access tokens are HS256
JWTs signed with the project's JWT secret. Only users carrying the
"admin" role may moderate products.
"""
import logging
from typing import List

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from vendor_hub.core.config import settings

logger = logging.getLogger(__name__)
security = HTTPBearer()

SUPABASE_JWT_ALGORITHMS: List[str] = ["HS256"]
SUPABASE_JWT_AUDIENCE: str = "authenticated"


def decode_supabase_token(token: str, secret: str | None = None) -> dict:
    """Verify signature, expiry and audience; returns the claims."""
    key = secret or settings.supabase_jwt_secret
    if not key:
        raise JWTError("SUPABASE_JWT_SECRET is not configured")
    return jwt.decode(
        token, key, algorithms=SUPABASE_JWT_ALGORITHMS, audience=SUPABASE_JWT_AUDIENCE
    )


def extract_roles(claims: dict) -> List[str]:
    roles: List[str] = []
    for source in ("app_metadata", "user_metadata"):
        role = (claims.get(source) or {}).get("role")
        if role and role not in roles:
            roles.append(role)
    return roles


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """
    Validate the Supabase JWT and return user data.

    Token validation includes:
    - Signature verification with the project JWT secret
    - Expiry check
    - Audience check ("authenticated")
    """
    token = credentials.credentials

    logger.debug("Validating Supabase session token")
    try:
        claims = decode_supabase_token(token)
    except JWTError as e:
        logger.warning(f"Authentication failed - JWT error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "code": "UNAUTHORIZED",
                "message": f"Invalid or expired token: {str(e)}",
            },
        )

    user_id = claims.get("sub")
    if not user_id:
        logger.warning("Authentication failed - missing user ID in token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "code": "UNAUTHORIZED",
                "message": "Invalid token: missing user ID",
            },
        )

    return {
        "user_id": user_id,
        "email": claims.get("email"),
        "roles": extract_roles(claims),
    }


async def require_admin(user: dict = Depends(get_current_user)) -> dict:
    """Dependency that only lets admin users through."""
    if "admin" not in user.get("roles", []):
        logger.warning(
            f"Access denied - user {user.get('user_id')} is not an admin. "
            f"Has roles: {user.get('roles', [])}"
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "code": "FORBIDDEN",
                "message": "Access denied. Admin role required",
            },
        )
    return user
