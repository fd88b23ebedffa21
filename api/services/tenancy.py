"""Tenant isolation for queries."""

from typing import Optional

from sqlalchemy.orm import Query

from api.middleware.error_handler import ValidationAPIError


def apply_tenant_scope(query: Query, model, tenant_id: Optional[int]) -> Query:
    """
    Restrict a query to one tenant's rows.

    Global accounts (no tenant) get the query back untouched.
    """
    if tenant_id is None:
        return query
    return query.filter(model.tenant_id == tenant_id)


def require_tenant(tenant_id: Optional[int]) -> int:
    """Tenant id for new records; global accounts cannot create tenant data."""
    if tenant_id is None:
        raise ValidationAPIError("A tenant context is required for this operation", field="tenantId")
    return tenant_id
