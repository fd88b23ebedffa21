"""Audit log endpoints (admin only)."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.config.database import get_db
from api.config.settings import settings
from api.models import AuditLog, AuditResource
from api.schemas.audit_logs import AuditLogResponse
from api.schemas.base import PaginatedResponse, paginate
from api.services.access import Principal
from api.services.rbac import require_admin
from api.services.tenancy import apply_tenant_scope

router = APIRouter()


@router.get("", response_model=PaginatedResponse[AuditLogResponse])
async def list_audit_logs(
    db: Session = Depends(get_db),
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, alias="perPage"),
    user_id: Optional[int] = Query(None, alias="userId"),
    resource: Optional[AuditResource] = Query(None),
    resource_id: Optional[int] = Query(None, alias="resourceId"),
    principal: Principal = Depends(require_admin),
):
    """List audit log entries of the tenant, newest first."""
    query = apply_tenant_scope(db.query(AuditLog), AuditLog, principal.tenant_id)

    # Filters
    if user_id:
        query = query.filter(AuditLog.user_id == user_id)
    if resource:
        query = query.filter(AuditLog.resource == resource.value)
    if resource_id:
        query = query.filter(AuditLog.resource_id == resource_id)

    # Count total
    total = query.count()

    # Paginate
    entries = (
        query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )

    return paginate([AuditLogResponse.model_validate(e) for e in entries], page, per_page, total)
