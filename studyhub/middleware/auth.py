"""
Supabase JWT authentication

Verifies the bearer token of a signed-in StudyHub user against the project's
JWKS and exposes the user id as a FastAPI dependency.
"""
import time
import logging
from typing import Optional
from fastapi import HTTPException, Header
from jose import jwt, jwk
import httpx

from studyhub import config

logger = logging.getLogger(__name__)

_jwks_cache: Optional[dict] = None
_jwks_cache_time: float = 0
JWKS_CACHE_DURATION = 60 * 60  # 1 hour in seconds

JWT_AUDIENCE = "authenticated"
SUPPORTED_ALGORITHMS = ["ES256", "RS256"]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail)


def get_supabase_auth_url() -> str:
    """Auth endpoint root of the Supabase project"""
    url = config.get_supabase_url()
    if not url:
        raise ValueError("SUPABASE_URL must be set")
    return f"{url.rstrip('/')}/auth/v1"


def reset_jwks_cache():
    """Drop cached signing keys (useful for testing)"""
    global _jwks_cache, _jwks_cache_time
    _jwks_cache = None
    _jwks_cache_time = 0


async def get_jwks() -> dict:
    """
    Fetch and cache JWKS from Supabase.
    An expired cache is still served when the refresh fails.
    """
    global _jwks_cache, _jwks_cache_time

    now = time.time()
    if _jwks_cache and (now - _jwks_cache_time) < JWKS_CACHE_DURATION:
        return _jwks_cache

    jwks_url = f"{get_supabase_auth_url()}/.well-known/jwks.json"
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
        raise HTTPException(
            status_code=500,
            detail="Failed to fetch authentication keys"
        )


def find_signing_key(jwks: dict, kid: str) -> dict:
    for key_data in jwks.get("keys", []):
        if key_data.get("kid") == kid:
            return key_data
    raise _unauthorized(f"Key with ID '{kid}' not found in JWKS")


async def verify_token(token: str) -> dict:
    """
    Verify a Supabase access token (ES256 or RS256) and return its claims.

    Raises:
        HTTPException: 401 for any invalid, expired or unverifiable token
    """
    try:
        jwks = await get_jwks()
        header = jwt.get_unverified_header(token)
        kid = header.get("kid")
        if not kid:
            raise _unauthorized("Token missing key ID (kid)")

        key = jwk.construct(find_signing_key(jwks, kid))
        return jwt.decode(
            token,
            key,
            algorithms=SUPPORTED_ALGORITHMS,
            audience=JWT_AUDIENCE,
            issuer=get_supabase_auth_url(),
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.JWTClaimsError as e:
        raise _unauthorized(f"Token validation failed: {str(e)}")
    except jwt.JWTError as e:
        raise _unauthorized(f"Invalid token: {str(e)}")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Token verification error: {e}", exc_info=True)
        raise _unauthorized("Token verification failed")


def parse_bearer_token(authorization: Optional[str]) -> str:
    """Extract the token from an 'Authorization: Bearer <token>' header value"""
    if not authorization:
        raise _unauthorized("Authorization header missing")

    scheme, _, token = authorization.partition(" ")
    if not token:
        raise _unauthorized("Invalid authorization header format. Expected 'Bearer <token>'")
    if scheme.lower() != "bearer":
        raise _unauthorized("Invalid authorization scheme. Expected 'Bearer'")
    return token.strip()


async def get_current_user_id(
    authorization: Optional[str] = Header(None)
) -> str:
    """FastAPI dependency returning the authenticated user's id (the `sub` claim)"""
    token = parse_bearer_token(authorization)
    payload = await verify_token(token)

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Invalid token: no user ID")
    return user_id
