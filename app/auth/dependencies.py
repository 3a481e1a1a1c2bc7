# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Verifies the admin's Supabase session token. Session issuance (login,
# logout) happens in the Supabase Auth client; this API only checks tokens.
#
# Supports both:
# - ES256 (new Supabase JWT signing keys) via JWKS
# - HS256 (legacy Supabase JWT secret)
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.post("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging
import time
from typing import Optional
from uuid import UUID

import httpx
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError

from app.config import settings
from app.auth.models import AuthUser
from app.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

# Missing headers are reported as UnauthorizedError (401), not FastAPI's default
security = HTTPBearer(auto_error=False)

# Cache for JWKS keys
_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour


def _get_jwks_url() -> str:
    """JWKS endpoint of the Supabase project (https://<ref>.supabase.co)."""
    return f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"


def _fetch_jwks() -> dict:
    """Fetch JWKS from Supabase with caching."""
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()
    if _jwks_cache and (current_time - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        response = httpx.get(_get_jwks_url(), timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = current_time
        return _jwks_cache
    except Exception as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
        # Expired cache beats no keys at all
        return _jwks_cache or {"keys": []}


def _get_signing_key(token: str) -> tuple[dict | str, str]:
    """
    Pick the verification key for a token.

    Returns:
        Tuple of (key, algorithm)

    Raises:
        UnauthorizedError: If no usable key exists
    """
    try:
        header = jwt.get_unverified_header(token)
    except JWTError as e:
        raise UnauthorizedError(f"Invalid token: {e}")

    alg = header.get("alg", "HS256")
    kid = header.get("kid")

    if alg == "HS256":
        if not settings.SUPABASE_JWT_SECRET:
            raise UnauthorizedError("HS256 tokens are not accepted: SUPABASE_JWT_SECRET is not set")
        return settings.SUPABASE_JWT_SECRET, alg

    for key in _fetch_jwks().get("keys", []):
        if key.get("kid") == kid:
            return key, alg

    logger.warning(f"No signing key for alg={alg}, kid={kid}")
    raise UnauthorizedError("Invalid token: unknown signing key")


def verify_token(token: str) -> AuthUser:
    """
    Decode and verify a Supabase access token.

    Raises:
        UnauthorizedError: If the token is invalid, expired or has no user
    """
    signing_key, algorithm = _get_signing_key(token)

    try:
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience="authenticated"
        )
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise UnauthorizedError("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise UnauthorizedError(f"Invalid token: {e}")

    try:
        user_id = UUID(payload.get("sub") or "")
    except ValueError:
        logger.warning(f"Invalid user id in token: {payload.get('sub')}")
        raise UnauthorizedError("Invalid token: malformed user ID")

    return AuthUser(id=user_id, email=payload.get("email"))


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AuthUser:
    """
    Require an authenticated admin.

    Runs before any route logic, so an unauthenticated mutation never
    reaches the stores.

    Raises:
        UnauthorizedError: 401 if the token is missing, invalid or expired
    """
    if credentials is None:
        raise UnauthorizedError("Missing bearer token")

    user = verify_token(credentials.credentials)
    logger.debug(f"Authenticated user: {user.id}")
    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[AuthUser]:
    """
    Get the admin if a valid token was sent, None otherwise.

    Used by public endpoints that show more to the admin.
    """
    if credentials is None:
        return None

    try:
        return verify_token(credentials.credentials)
    except UnauthorizedError:
        return None
