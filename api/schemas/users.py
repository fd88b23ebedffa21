"""Pydantic schemas for User and Auth endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from .base import CamelModel


class UserSummary(CamelModel):
    """Minimal user info embedded in other responses."""

    id: int
    email: str
    full_name: str


class UserCreate(CamelModel):
    """Schema for creating a user."""

    email: str = Field(min_length=3, max_length=255)
    full_name: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=8, max_length=72)
    role_ids: list[int] = []

    @field_validator("email")
    @classmethod
    def email_has_at(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("Invalid email address")
        return value.strip().lower()


class RoleSummary(CamelModel):
    id: int
    name: str


class UserResponse(CamelModel):
    """Schema for user response. Never carries the password hash."""

    id: int
    tenant_id: Optional[int] = None
    email: str
    full_name: str
    roles: list[RoleSummary] = []
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class LoginRequest(CamelModel):
    """Email and password sign-in."""

    email: str
    password: str


class ProfileResponse(CamelModel):
    """Signed-in user with flattened role names and permissions."""

    id: int
    tenant_id: Optional[int] = None
    email: str
    full_name: str
    roles: list[str] = []
    permissions: list[str] = []


class TokenResponse(CamelModel):
    """Access token plus the profile of the user it was issued to."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: ProfileResponse
