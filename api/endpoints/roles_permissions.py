"""Role and permission management endpoints (admin only)."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.config.database import get_db
from api.config.settings import settings
from api.schemas.base import PaginatedResponse, paginate
from api.schemas.roles import (
    PermissionCreate,
    PermissionResponse,
    PermissionUpdate,
    RoleCreate,
    RoleResponse,
    RoleUpdate,
)
from api.services.access import Principal
from api.services.audit import AuditTrail, get_audit_trail
from api.services.rbac import require_admin
from api.services.roles_permissions import PermissionService, RoleService

router = APIRouter()


def get_role_service(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
    audit: AuditTrail = Depends(get_audit_trail),
) -> RoleService:
    return RoleService(db, principal, audit)


def get_permission_service(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
    audit: AuditTrail = Depends(get_audit_trail),
) -> PermissionService:
    return PermissionService(db, principal, audit)


# =====================
# Roles
# =====================


@router.get("/roles", response_model=PaginatedResponse[RoleResponse])
async def list_roles(
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, alias="perPage"),
    search: Optional[str] = Query(None),
    service: RoleService = Depends(get_role_service),
):
    """List active roles of the tenant."""
    roles, total = service.list(page, per_page, search=search)
    return paginate([RoleResponse.model_validate(r) for r in roles], page, per_page, total)


@router.get("/roles/{role_id}", response_model=RoleResponse)
async def get_role(
    role_id: int,
    include_inactive: bool = Query(False, alias="includeInactive"),
    service: RoleService = Depends(get_role_service),
):
    """Get a role with its permissions."""
    return RoleResponse.model_validate(service.get(role_id, include_inactive=include_inactive))


@router.post("/roles", response_model=RoleResponse, status_code=201)
async def create_role(
    data: RoleCreate,
    service: RoleService = Depends(get_role_service),
):
    """Create a role. Names are unique within the tenant."""
    return RoleResponse.model_validate(service.create(data.model_dump()))


@router.patch("/roles/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: int,
    data: RoleUpdate,
    service: RoleService = Depends(get_role_service),
):
    """Update a role; permissionIds replaces its permission set."""
    return RoleResponse.model_validate(service.update(role_id, data.model_dump(exclude_unset=True)))


@router.delete("/roles/{role_id}", status_code=204)
async def delete_role(
    role_id: int,
    service: RoleService = Depends(get_role_service),
):
    """Soft delete a role. Its users lose the role's permissions."""
    service.soft_delete(role_id)


# =====================
# Permissions
# =====================


@router.get("/permissions", response_model=PaginatedResponse[PermissionResponse])
async def list_permissions(
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, alias="perPage"),
    search: Optional[str] = Query(None),
    service: PermissionService = Depends(get_permission_service),
):
    """List active permissions of the tenant."""
    permissions, total = service.list(page, per_page, search=search)
    return paginate([PermissionResponse.model_validate(p) for p in permissions], page, per_page, total)


@router.get("/permissions/{permission_id}", response_model=PermissionResponse)
async def get_permission(
    permission_id: int,
    include_inactive: bool = Query(False, alias="includeInactive"),
    service: PermissionService = Depends(get_permission_service),
):
    """Get a permission by ID."""
    return PermissionResponse.model_validate(service.get(permission_id, include_inactive=include_inactive))


@router.post("/permissions", response_model=PermissionResponse, status_code=201)
async def create_permission(
    data: PermissionCreate,
    service: PermissionService = Depends(get_permission_service),
):
    """Create a permission. Names are unique within the tenant."""
    return PermissionResponse.model_validate(service.create(data.model_dump()))


@router.patch("/permissions/{permission_id}", response_model=PermissionResponse)
async def update_permission(
    permission_id: int,
    data: PermissionUpdate,
    service: PermissionService = Depends(get_permission_service),
):
    """Update a permission."""
    return PermissionResponse.model_validate(service.update(permission_id, data.model_dump(exclude_unset=True)))


@router.delete("/permissions/{permission_id}", status_code=204)
async def delete_permission(
    permission_id: int,
    service: PermissionService = Depends(get_permission_service),
):
    """Soft delete a permission."""
    service.soft_delete(permission_id)
