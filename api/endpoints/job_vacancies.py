"""Job vacancy endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.config.database import get_db
from api.config.settings import settings
from api.schemas.base import PaginatedResponse, paginate
from api.schemas.candidates import CandidateResponse
from api.schemas.job_vacancies import JobVacancyCreate, JobVacancyResponse, JobVacancyUpdate
from api.services.access import Principal
from api.services.audit import AuditTrail, get_audit_trail
from api.services.job_vacancies import JobVacancyService
from api.services.rbac import get_principal

router = APIRouter()


def get_vacancy_service(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    audit: AuditTrail = Depends(get_audit_trail),
) -> JobVacancyService:
    return JobVacancyService(db, principal, audit)


@router.get("", response_model=PaginatedResponse[JobVacancyResponse])
async def list_job_vacancies(
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, alias="perPage"),
    client_id: Optional[int] = Query(None, alias="clientId"),
    service: JobVacancyService = Depends(get_vacancy_service),
):
    """List job vacancies visible to the caller."""
    vacancies, total = service.list(page, per_page, client_id=client_id)
    return paginate([JobVacancyResponse.model_validate(v) for v in vacancies], page, per_page, total)


@router.get("/{vacancy_id}", response_model=JobVacancyResponse)
async def get_job_vacancy(
    vacancy_id: int,
    include_inactive: bool = Query(False, alias="includeInactive"),
    service: JobVacancyService = Depends(get_vacancy_service),
):
    """Get a job vacancy by ID."""
    return JobVacancyResponse.model_validate(service.get(vacancy_id, include_inactive=include_inactive))


@router.get("/{vacancy_id}/candidates", response_model=PaginatedResponse[CandidateResponse])
async def list_vacancy_candidates(
    vacancy_id: int,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, alias="perPage"),
    service: JobVacancyService = Depends(get_vacancy_service),
):
    """List the active candidates of a vacancy."""
    candidates, total = service.list_candidates(vacancy_id, page, per_page)
    return paginate([CandidateResponse.model_validate(c) for c in candidates], page, per_page, total)


@router.post("", response_model=JobVacancyResponse, status_code=201)
async def create_job_vacancy(
    data: JobVacancyCreate,
    service: JobVacancyService = Depends(get_vacancy_service),
):
    """Create a job vacancy, copying the template's candidate data schema."""
    return JobVacancyResponse.model_validate(service.create(data.model_dump()))


@router.patch("/{vacancy_id}", response_model=JobVacancyResponse)
async def update_job_vacancy(
    vacancy_id: int,
    data: JobVacancyUpdate,
    service: JobVacancyService = Depends(get_vacancy_service),
):
    """Update a job vacancy."""
    return JobVacancyResponse.model_validate(service.update(vacancy_id, data.model_dump(exclude_unset=True)))


@router.delete("/{vacancy_id}", status_code=204)
async def delete_job_vacancy(
    vacancy_id: int,
    service: JobVacancyService = Depends(get_vacancy_service),
):
    """Soft delete a job vacancy."""
    service.soft_delete(vacancy_id)
