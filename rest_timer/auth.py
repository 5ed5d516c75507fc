"""
Supabase JWT authentication

Verifies bearer tokens against the project's JWKS (public keys) and exposes
the authenticated user id as a FastAPI dependency.
"""
import logging
import time
from typing import Optional

import httpx
from fastapi import Header, HTTPException
from jose import jwk, jwt

from rest_timer import config

logger = logging.getLogger(__name__)

_jwks_cache: Optional[dict] = None
_jwks_cache_time: float = 0
JWKS_CACHE_DURATION = 60 * 60  # 1 hour in seconds

JWT_AUDIENCE = "authenticated"


def get_supabase_url() -> str:
    if not config.SUPABASE_URL:
        raise ValueError("SUPABASE_URL must be set")
    return config.SUPABASE_URL


async def get_jwks() -> dict:
    """Fetch JWKS from Supabase, cached for an hour"""
    global _jwks_cache, _jwks_cache_time

    now = time.time()
    if _jwks_cache and (now - _jwks_cache_time) < JWKS_CACHE_DURATION:
        return _jwks_cache

    jwks_url = f"{get_supabase_url()}/auth/v1/.well-known/jwks.json"
    logger.info(f"Fetching JWKS from Supabase: {jwks_url}")

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(jwks_url, timeout=10.0)
            response.raise_for_status()
            _jwks_cache = response.json()
            _jwks_cache_time = now
            return _jwks_cache
    except Exception as e:
        logger.error(f"Failed to fetch JWKS: {e}")
        if _jwks_cache:
            logger.warning("Using expired JWKS cache due to fetch failure")
            return _jwks_cache
        raise HTTPException(status_code=500, detail="Failed to fetch authentication keys")


async def verify_token(token: str) -> dict:
    """
    Verify a Supabase JWT (ES256 or RS256) and return its payload.
    Raises HTTPException(401) if verification fails.
    """
    try:
        jwks = await get_jwks()

        kid = jwt.get_unverified_header(token).get("kid")
        if not kid:
            raise HTTPException(status_code=401, detail="Token missing key ID (kid)")

        key_data = next((k for k in jwks.get("keys", []) if k.get("kid") == kid), None)
        if not key_data:
            raise HTTPException(status_code=401, detail=f"Key with ID '{kid}' not found in JWKS")

        return jwt.decode(
            token,
            jwk.construct(key_data),
            algorithms=["ES256", "RS256"],
            audience=JWT_AUDIENCE,
            issuer=f"{get_supabase_url()}/auth/v1",
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired")
    except jwt.JWTClaimsError as e:
        raise HTTPException(status_code=401, detail=f"Token validation failed: {str(e)}")
    except jwt.JWTError as e:
        raise HTTPException(status_code=401, detail=f"Invalid token: {str(e)}")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Token verification error: {e}", exc_info=True)
        raise HTTPException(status_code=401, detail="Token verification failed")


async def get_current_user_id(
    authorization: Optional[str] = Header(None)
) -> str:
    """FastAPI dependency returning the authenticated user ID ('sub' claim)"""
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization header missing")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(
            status_code=401,
            detail="Invalid authorization header format. Expected 'Bearer <token>'"
        )

    payload = await verify_token(token)
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token: no user ID")
    return user_id
