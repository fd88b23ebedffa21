"""Pydantic schemas for Candidate endpoints."""

from datetime import datetime
from typing import Any, Optional

from .base import CamelModel


class CandidateCreate(CamelModel):
    """Schema for creating a candidate. data is checked against the vacancy schema."""

    job_vacancy_id: int
    data: dict[str, Any] = {}


class CandidateUpdate(CamelModel):
    """Schema for updating a candidate."""

    data: Optional[dict[str, Any]] = None


class CandidateResponse(CamelModel):
    """Schema for candidate response."""

    id: int
    tenant_id: int
    job_vacancy_id: int
    created_by_id: int
    data: dict[str, Any]
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
