"""Pydantic schemas for JobTemplate endpoints and template fields."""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, Field, field_validator

from api.services.template_schema import FieldType

from .base import CamelModel


class TemplateField(CamelModel):
    """One field of a candidate data schema."""

    key: str = Field(min_length=1)
    type: FieldType
    required: bool = False
    label: Optional[str] = None
    options: Optional[list[str]] = None

    @field_validator("key")
    @classmethod
    def key_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Field key must not be empty")
        return value


def check_unique_keys(fields: list[TemplateField]) -> list[TemplateField]:
    """Reject schemas that define the same key twice."""
    seen = set()
    for field in fields:
        if field.key in seen:
            raise ValueError(f"Duplicate field key '{field.key}'")
        seen.add(field.key)
    return fields


TemplateSchema = Annotated[list[TemplateField], AfterValidator(check_unique_keys)]


class JobTemplateCreate(CamelModel):
    """Schema for creating a job template."""

    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    client_id: int
    candidate_data_schema: TemplateSchema = []


class JobTemplateResponse(CamelModel):
    """Schema for job template response."""

    id: int
    tenant_id: int
    client_id: int
    name: str
    description: Optional[str] = None
    candidate_data_schema: list[TemplateField] = []
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
