"""Shared create/read/update/soft-delete flow for tenant-owned records.

Every operation scopes its lookup to the caller's tenant first, so a record
in another tenant is indistinguishable from a missing one (NotFound), and
only then asks the access resolver (Forbidden).
"""

from typing import Any, Optional

import structlog
from sqlalchemy.orm import Query, Session

from api.middleware.error_handler import NotFoundError
from api.models import AuditAction, AuditResource
from api.services.access import AccessScopeResolver, Operation, Principal
from api.services.audit import AuditTrail, snapshot
from api.services.lookups import build_resolver
from api.services.tenancy import apply_tenant_scope

logger = structlog.get_logger()


class LifecycleService:
    """Base class for per-entity services."""

    model = None
    resource: AuditResource = None
    label = "Record"
    # Columns an update may change but never clear
    required_fields: tuple[str, ...] = ()

    def __init__(
        self,
        db: Session,
        principal: Principal,
        audit: Optional[AuditTrail] = None,
        resolver: Optional[AccessScopeResolver] = None,
    ):
        self.db = db
        self.principal = principal
        self.audit = audit or AuditTrail(db)
        self.resolver = resolver or build_resolver(db, principal.tenant_id)

    # -----------------
    # Query helpers
    # -----------------

    def scoped_query(self) -> Query:
        return apply_tenant_scope(self.db.query(self.model), self.model, self.principal.tenant_id)

    def fetch(self, record_id: int, include_inactive: bool = False):
        """Tenant-scoped lookup by id. Raises NotFoundError."""
        query = self.scoped_query().filter(self.model.id == record_id)
        if not include_inactive:
            query = query.filter(self.model.is_active.is_(True))

        record = query.first()
        if not record:
            raise NotFoundError(self.label, record_id)
        return record

    def authorize(self, operation: Operation, target: Any = None, changes: Optional[dict] = None) -> None:
        self.resolver.authorize(self.principal, operation, self.resource, target, changes)

    def filter_list(self, query: Query, **filters) -> Query:
        """Hook for entity-specific list filters."""
        return query

    # -----------------
    # Operations
    # -----------------

    def list(self, page: int = 1, per_page: int = 10, **filters) -> tuple[list, int]:
        """Active records visible to the principal, oldest first."""
        query = self.scoped_query().filter(self.model.is_active.is_(True))
        query = self.resolver.scope_query(query, self.principal, self.resource)
        query = self.filter_list(query, **filters)

        total = query.count()
        items = query.order_by(self.model.id).offset((page - 1) * per_page).limit(per_page).all()
        return items, total

    def get(self, record_id: int, include_inactive: bool = False):
        """
        Fetch one record the principal may read.

        Soft-deleted records are returned only to admins who ask for them.
        """
        record = self.fetch(record_id, include_inactive=include_inactive and self.principal.is_admin)
        self.authorize(Operation.READ, record)
        return record

    def soft_delete(self, record_id: int) -> None:
        """Mark a record inactive. Deleting an already deleted record is a no-op."""
        with self.audit.track(self.principal, AuditAction.DELETE, self.resource, record_id) as entry:
            record = self.fetch(record_id, include_inactive=True)
            self.authorize(Operation.DELETE, record)

            entry.old_values = snapshot(record)
            record.is_active = False
            self.db.commit()
            entry.new_values = snapshot(record)

        logger.info(f"{self.label} deleted (soft)", id=record_id, tenant_id=self.principal.tenant_id)

    def apply_changes(self, record, changes: dict[str, Any]) -> None:
        for key, value in changes.items():
            if value is None and key in self.required_fields:
                continue
            setattr(record, key, value)
