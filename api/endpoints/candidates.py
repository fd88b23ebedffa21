"""Candidate endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.config.database import get_db
from api.config.settings import settings
from api.schemas.base import PaginatedResponse, paginate
from api.schemas.candidates import CandidateCreate, CandidateResponse, CandidateUpdate
from api.services.access import Principal
from api.services.audit import AuditTrail, get_audit_trail
from api.services.candidates import CandidateService
from api.services.rbac import get_principal

router = APIRouter()


def get_candidate_service(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    audit: AuditTrail = Depends(get_audit_trail),
) -> CandidateService:
    return CandidateService(db, principal, audit)


@router.get("", response_model=PaginatedResponse[CandidateResponse])
async def list_candidates(
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, alias="perPage"),
    job_vacancy_id: Optional[int] = Query(None, alias="jobVacancyId"),
    service: CandidateService = Depends(get_candidate_service),
):
    """
    List candidates visible to the caller.

    Agency users see the candidates they submitted; employees see candidates
    of their clients' vacancies.
    """
    candidates, total = service.list(page, per_page, job_vacancy_id=job_vacancy_id)
    return paginate([CandidateResponse.model_validate(c) for c in candidates], page, per_page, total)


@router.get("/{candidate_id}", response_model=CandidateResponse)
async def get_candidate(
    candidate_id: int,
    include_inactive: bool = Query(False, alias="includeInactive"),
    service: CandidateService = Depends(get_candidate_service),
):
    """Get a candidate by ID."""
    return CandidateResponse.model_validate(service.get(candidate_id, include_inactive=include_inactive))


@router.post("", response_model=CandidateResponse, status_code=201)
async def create_candidate(
    data: CandidateCreate,
    service: CandidateService = Depends(get_candidate_service),
):
    """Submit a candidate to a vacancy assigned to the caller's agency."""
    return CandidateResponse.model_validate(service.create(data.model_dump()))


@router.patch("/{candidate_id}", response_model=CandidateResponse)
async def update_candidate(
    candidate_id: int,
    data: CandidateUpdate,
    service: CandidateService = Depends(get_candidate_service),
):
    """Update a candidate the caller submitted."""
    return CandidateResponse.model_validate(service.update(candidate_id, data.model_dump(exclude_unset=True)))


@router.delete("/{candidate_id}", status_code=204)
async def delete_candidate(
    candidate_id: int,
    service: CandidateService = Depends(get_candidate_service),
):
    """Soft delete a candidate the caller submitted."""
    service.soft_delete(candidate_id)
