import asyncio
from functools import lru_cache
from fastapi import HTTPException, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from circular_democracy.config import get_settings, Settings

security = HTTPBearer()

JWKS_PATH = "/auth/v1/.well-known/jwks.json"


@lru_cache()
def _jwks_client(supabase_url: str) -> jwt.PyJWKClient:
    return jwt.PyJWKClient(f"{supabase_url.rstrip('/')}{JWKS_PATH}")


async def _verification_key(token: str, settings: Settings) -> tuple:
    """Key and allowed algorithms for a Supabase JWT token.

    Uses the shared JWT secret when configured, otherwise the project's
    published signing keys. The JWKS fetch is blocking and runs in a thread.
    """
    if settings.supabase_jwt_secret:
        return settings.supabase_jwt_secret, ["HS256"]

    try:
        signing_key = await asyncio.to_thread(
            _jwks_client(settings.supabase_url).get_signing_key_from_jwt, token
        )
    except (jwt.InvalidTokenError, jwt.PyJWKClientError):
        raise HTTPException(status_code=401, detail="Invalid token")
    return signing_key.key, ["RS256", "ES256"]


def _decode_supabase_token(token: str, key, algorithms: list[str]) -> dict:
    """Decode and validate a Supabase JWT token."""
    try:
        return jwt.decode(
            token,
            key,
            algorithms=algorithms,
            audience="authenticated",
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """Extract and validate the current user from the Bearer token."""
    settings = get_settings()
    token = credentials.credentials
    key, algorithms = await _verification_key(token, settings)
    payload = _decode_supabase_token(token, key, algorithms)

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token: no user ID")

    return {"user_id": user_id, "email": payload.get("email", "")}
