"""User entity and request/response schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel

from taskapi.models.rules import normalize_mail

Mail = Annotated[str, AfterValidator(normalize_mail)]


class User(BaseModel):
    """User domain entity."""

    id: str | None = None
    mail: str
    created_at: datetime | None = None


class UserCreate(BaseModel):
    """Schema for login-or-register."""

    mail: Mail


class AuthUser(BaseModel):
    """Safe projection of a user: never exposes storage fields."""

    id: str
    mail: str


class AuthEnvelope(BaseModel):
    """Envelope returned by the login/register endpoints."""

    success: bool = True
    message: str
    data: None = None
    timestamp: str
    token: str
    exists: bool
    user: AuthUser


class ProfileEnvelope(BaseModel):
    """Envelope returned by the current-user endpoint."""

    success: bool = True
    message: str
    data: AuthUser
    timestamp: str
