"""Pydantic schemas for audit log endpoints."""

from datetime import datetime
from typing import Any, Optional

from .base import CamelModel


class AuditLogResponse(CamelModel):
    """Schema for audit log entry."""

    id: int
    tenant_id: Optional[int] = None
    user_id: Optional[int] = None
    action: str
    resource: str
    resource_id: Optional[int] = None
    old_values: Optional[dict[str, Any]] = None
    new_values: Optional[dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    status: str
    error_message: Optional[str] = None
    created_at: datetime
