"""Pydantic schemas for JobVacancy endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel
from .job_templates import TemplateField, TemplateSchema


class JobVacancyCreate(CamelModel):
    """
    Schema for creating a job vacancy.

    candidate_data_schema overrides the template's schema when given.
    """

    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    client_id: int
    job_template_id: int
    candidate_data_schema: Optional[TemplateSchema] = None
    assigned_agency_ids: list[int] = []


class JobVacancyUpdate(CamelModel):
    """
    Schema for updating a job vacancy (all fields optional).

    Changing job_template_id without a candidate_data_schema copies the new
    template's schema.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    client_id: Optional[int] = None
    job_template_id: Optional[int] = None
    candidate_data_schema: Optional[TemplateSchema] = None
    assigned_agency_ids: Optional[list[int]] = None


class JobVacancyResponse(CamelModel):
    """Schema for job vacancy response."""

    id: int
    tenant_id: int
    client_id: int
    job_template_id: int
    created_by_id: int
    name: str
    description: Optional[str] = None
    candidate_data_schema: list[TemplateField] = []
    assigned_agency_ids: list[int] = []
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
