"""Agency management endpoints (admin only)."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.config.database import get_db
from api.config.settings import settings
from api.schemas.agencies import AgencyCreate, AgencyResponse, AgencyUpdate
from api.schemas.base import PaginatedResponse, paginate
from api.services.access import Principal
from api.services.agencies import AgencyService
from api.services.audit import AuditTrail, get_audit_trail
from api.services.rbac import require_admin

router = APIRouter()


def get_agency_service(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
    audit: AuditTrail = Depends(get_audit_trail),
) -> AgencyService:
    return AgencyService(db, principal, audit)


@router.get("", response_model=PaginatedResponse[AgencyResponse])
async def list_agencies(
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, alias="perPage"),
    search: Optional[str] = Query(None),
    service: AgencyService = Depends(get_agency_service),
):
    """List active agencies of the tenant."""
    agencies, total = service.list(page, per_page, search=search)
    return paginate([AgencyResponse.model_validate(a) for a in agencies], page, per_page, total)


@router.get("/{agency_id}", response_model=AgencyResponse)
async def get_agency(
    agency_id: int,
    include_inactive: bool = Query(False, alias="includeInactive"),
    service: AgencyService = Depends(get_agency_service),
):
    """Get an agency with its members."""
    return AgencyResponse.model_validate(service.get(agency_id, include_inactive=include_inactive))


@router.post("", response_model=AgencyResponse, status_code=201)
async def create_agency(
    data: AgencyCreate,
    service: AgencyService = Depends(get_agency_service),
):
    """Create an agency."""
    return AgencyResponse.model_validate(service.create(data.model_dump()))


@router.patch("/{agency_id}", response_model=AgencyResponse)
async def update_agency(
    agency_id: int,
    data: AgencyUpdate,
    service: AgencyService = Depends(get_agency_service),
):
    """Update an agency; userIds replaces its member list."""
    return AgencyResponse.model_validate(service.update(agency_id, data.model_dump(exclude_unset=True)))


@router.delete("/{agency_id}", status_code=204)
async def delete_agency(
    agency_id: int,
    service: AgencyService = Depends(get_agency_service),
):
    """Soft delete an agency. Its users lose access to assigned vacancies."""
    service.soft_delete(agency_id)
