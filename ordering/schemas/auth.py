"""Admin authentication schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class LoginRequest(BaseModel):
    """Payload for admin login."""

    email: str
    password: str


class TokenResponse(BaseModel):
    """JWT response payload."""

    access_token: str
    token_type: str = "bearer"


class AdminResponse(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: str
    last_login_at: datetime | None

    model_config = ConfigDict(from_attributes=True)
