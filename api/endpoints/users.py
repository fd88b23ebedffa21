"""User management endpoints (admin only)."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.config.database import get_db
from api.config.settings import settings
from api.schemas.base import PaginatedResponse, paginate
from api.schemas.users import UserCreate, UserResponse
from api.services.access import Principal
from api.services.audit import AuditTrail, get_audit_trail
from api.services.rbac import require_admin
from api.services.users import UserService

router = APIRouter()


def get_user_service(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
    audit: AuditTrail = Depends(get_audit_trail),
) -> UserService:
    return UserService(db, principal, audit)


@router.get("", response_model=PaginatedResponse[UserResponse])
async def list_users(
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, alias="perPage"),
    search: Optional[str] = Query(None),
    service: UserService = Depends(get_user_service),
):
    """List active users of the tenant."""
    users, total = service.list(page, per_page, search=search)
    return paginate([UserResponse.model_validate(u) for u in users], page, per_page, total)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    include_inactive: bool = Query(False, alias="includeInactive"),
    service: UserService = Depends(get_user_service),
):
    """Get a user by ID."""
    return UserResponse.model_validate(service.get(user_id, include_inactive=include_inactive))


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    data: UserCreate,
    service: UserService = Depends(get_user_service),
):
    """Create a user in the admin's tenant."""
    return UserResponse.model_validate(service.create(data.model_dump()))
