"""Job template endpoints. Templates have no update operation."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.config.database import get_db
from api.config.settings import settings
from api.schemas.base import PaginatedResponse, paginate
from api.schemas.job_templates import JobTemplateCreate, JobTemplateResponse
from api.services.access import Principal
from api.services.audit import AuditTrail, get_audit_trail
from api.services.job_templates import JobTemplateService
from api.services.rbac import get_principal

router = APIRouter()


def get_template_service(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    audit: AuditTrail = Depends(get_audit_trail),
) -> JobTemplateService:
    return JobTemplateService(db, principal, audit)


@router.get("", response_model=PaginatedResponse[JobTemplateResponse])
async def list_job_templates(
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, alias="perPage"),
    client_id: Optional[int] = Query(None, alias="clientId"),
    service: JobTemplateService = Depends(get_template_service),
):
    """List job templates, optionally for one client."""
    templates, total = service.list(page, per_page, client_id=client_id)
    return paginate([JobTemplateResponse.model_validate(t) for t in templates], page, per_page, total)


@router.get("/{template_id}", response_model=JobTemplateResponse)
async def get_job_template(
    template_id: int,
    include_inactive: bool = Query(False, alias="includeInactive"),
    service: JobTemplateService = Depends(get_template_service),
):
    """Get a job template by ID."""
    return JobTemplateResponse.model_validate(service.get(template_id, include_inactive=include_inactive))


@router.post("", response_model=JobTemplateResponse, status_code=201)
async def create_job_template(
    data: JobTemplateCreate,
    service: JobTemplateService = Depends(get_template_service),
):
    """Create a job template (admin only)."""
    return JobTemplateResponse.model_validate(service.create(data.model_dump()))


@router.delete("/{template_id}", status_code=204)
async def delete_job_template(
    template_id: int,
    service: JobTemplateService = Depends(get_template_service),
):
    """Soft delete a job template. Vacancies keep their schema copy."""
    service.soft_delete(template_id)
