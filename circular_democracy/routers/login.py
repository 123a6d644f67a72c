from fastapi import APIRouter, HTTPException
from loguru import logger
from supabase import create_client
from circular_democracy.config import get_settings
from circular_democracy.models.auth import LoginRequest, SessionResponse

router = APIRouter(prefix="/api/v1", tags=["Auth"])


@router.post("/login", response_model=SessionResponse)
async def login(body: LoginRequest):
    """Password sign-in through Supabase Auth, returning the session."""
    settings = get_settings()
    # Fresh anon client per request: signing in stores the session on the client
    client = create_client(settings.supabase_url, settings.supabase_anon_key)

    try:
        result = client.auth.sign_in_with_password(
            {"email": body.email, "password": body.password}
        )
    except Exception as e:
        logger.info(f"Login failed: {e}")
        raise HTTPException(status_code=401, detail=getattr(e, "code", None) or "Invalid credentials")

    session = result.session
    if session is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return SessionResponse(
        access_token=session.access_token,
        token_type=session.token_type,
        expires_in=session.expires_in,
        expires_at=session.expires_at,
        refresh_token=session.refresh_token,
        user={"id": session.user.id, "email": session.user.email},
    )
