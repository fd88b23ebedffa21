"""Pydantic schemas for Role and Permission endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel


class PermissionCreate(CamelModel):
    """Schema for creating a permission."""

    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None


class PermissionUpdate(CamelModel):
    """Schema for updating a permission (all fields optional)."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


class PermissionResponse(CamelModel):
    """Schema for permission response."""

    id: int
    tenant_id: int
    name: str
    description: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class RoleCreate(CamelModel):
    """Schema for creating a role."""

    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    permission_ids: list[int] = []


class RoleUpdate(CamelModel):
    """Schema for updating a role. permission_ids replaces the whole set."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    permission_ids: Optional[list[int]] = None


class RoleResponse(CamelModel):
    """Schema for role response."""

    id: int
    tenant_id: int
    name: str
    description: Optional[str] = None
    permissions: list[PermissionResponse] = []
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
