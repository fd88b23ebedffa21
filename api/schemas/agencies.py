"""Pydantic schemas for Agency endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel
from .users import UserSummary


class AgencyCreate(CamelModel):
    """Schema for creating an agency."""

    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    contact_email: Optional[str] = None
    user_ids: list[int] = []


class AgencyUpdate(CamelModel):
    """Schema for updating an agency. user_ids replaces the member list."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    contact_email: Optional[str] = None
    user_ids: Optional[list[int]] = None


class AgencyResponse(CamelModel):
    """Schema for agency response."""

    id: int
    tenant_id: int
    name: str
    description: Optional[str] = None
    contact_email: Optional[str] = None
    users: list[UserSummary] = []
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
