from pydantic import BaseModel, EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class SessionUser(BaseModel):
    id: str
    email: str | None = None


class SessionResponse(BaseModel):
    access_token: str
    token_type: str
    expires_in: int
    expires_at: int | None = None
    refresh_token: str
    user: SessionUser
