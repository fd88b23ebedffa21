"""Pydantic schemas for Client endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel


class ClientBase(CamelModel):
    """Base client fields."""

    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None


class ClientCreate(ClientBase):
    """Schema for creating a client."""

    assigned_employee_id: int


class ClientUpdate(CamelModel):
    """Schema for updating a client (all fields optional)."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    assigned_employee_id: Optional[int] = None


class ClientResponse(ClientBase):
    """Schema for client response."""

    id: int
    tenant_id: int
    assigned_employee_id: int
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
