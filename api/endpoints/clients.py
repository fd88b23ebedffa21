"""Client CRUD endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.config.database import get_db
from api.config.settings import settings
from api.schemas.base import PaginatedResponse, paginate
from api.schemas.clients import ClientCreate, ClientResponse, ClientUpdate
from api.services.access import Principal
from api.services.audit import AuditTrail, get_audit_trail
from api.services.clients import ClientService
from api.services.rbac import get_principal

router = APIRouter()


def get_client_service(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    audit: AuditTrail = Depends(get_audit_trail),
) -> ClientService:
    return ClientService(db, principal, audit)


@router.get("", response_model=PaginatedResponse[ClientResponse])
async def list_clients(
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, alias="perPage"),
    search: Optional[str] = Query(None),
    service: ClientService = Depends(get_client_service),
):
    """List active clients: all for admins, assigned ones for employees."""
    clients, total = service.list(page, per_page, search=search)
    return paginate([ClientResponse.model_validate(c) for c in clients], page, per_page, total)


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: int,
    include_inactive: bool = Query(False, alias="includeInactive"),
    service: ClientService = Depends(get_client_service),
):
    """Get a client by ID."""
    return ClientResponse.model_validate(service.get(client_id, include_inactive=include_inactive))


@router.post("", response_model=ClientResponse, status_code=201)
async def create_client(
    data: ClientCreate,
    service: ClientService = Depends(get_client_service),
):
    """Create a new client (admin only)."""
    return ClientResponse.model_validate(service.create(data.model_dump()))


@router.patch("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: int,
    data: ClientUpdate,
    service: ClientService = Depends(get_client_service),
):
    """Update a client (admin only)."""
    return ClientResponse.model_validate(service.update(client_id, data.model_dump(exclude_unset=True)))


@router.delete("/{client_id}", status_code=204)
async def delete_client(
    client_id: int,
    service: ClientService = Depends(get_client_service),
):
    """Soft delete a client (set inactive)."""
    service.soft_delete(client_id)
