from datetime import datetime

from pydantic import BaseModel


class SignUpRequest(BaseModel):
    email: str
    password: str
    full_name: str
    phone: str | None = None


class SignInRequest(BaseModel):
    email: str
    password: str


class SessionUser(BaseModel):
    id: int
    full_name: str
    email: str
    role: str


class SessionResponse(BaseModel):
    token: str
    user: SessionUser
    role: str
    expires_at: datetime
