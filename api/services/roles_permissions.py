"""Role and Permission lifecycles (admin only).

Names are unique per tenant, including soft-deleted rows, which keep their
name reserved.
"""

from typing import Any, Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query

from api.middleware.error_handler import ConflictError, ValidationAPIError
from api.models import AuditAction, AuditResource, Permission, Role
from api.services.access import Operation
from api.services.audit import snapshot
from api.services.lifecycle import LifecycleService
from api.services.tenancy import require_tenant

logger = structlog.get_logger()


class _NamedService(LifecycleService):
    """Shared name-uniqueness handling for roles and permissions."""

    required_fields = ("name",)

    def _check_name(self, tenant_id: int, name: str, exclude_id: Optional[int] = None) -> None:
        query = self.db.query(self.model).filter(
            self.model.tenant_id == tenant_id,
            self.model.name == name,
        )
        if exclude_id is not None:
            query = query.filter(self.model.id != exclude_id)
        if query.first():
            raise ConflictError(self.label, name)

    def _commit(self, name: str) -> None:
        """Commit, reporting a concurrent insert of the same name as a conflict."""
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"{self.label} name conflict on commit", name=name)
            raise ConflictError(self.label, name)

    def filter_list(self, query: Query, search: Optional[str] = None, **filters) -> Query:
        if search:
            query = query.filter(self.model.name.ilike(f"%{search}%"))
        return query

    def _snapshot(self, record) -> dict[str, Any]:
        return snapshot(record)

    def _build(self, tenant_id: int, values: dict[str, Any]):
        return self.model(tenant_id=tenant_id, **values)

    def _set_relations(self, record, values: dict[str, Any]) -> None:
        pass

    def create(self, values: dict[str, Any]):
        with self.audit.track(self.principal, AuditAction.CREATE, self.resource) as entry:
            self.authorize(Operation.CREATE, values)
            tenant_id = require_tenant(self.principal.tenant_id)
            self._check_name(tenant_id, values["name"])

            values = dict(values)
            record = self._build(tenant_id, values)
            self._set_relations(record, values)
            self.db.add(record)
            self._commit(record.name)
            self.db.refresh(record)

            entry.resource_id = record.id
            entry.new_values = self._snapshot(record)

        logger.info(f"{self.label} created", id=record.id, name=record.name, tenant_id=record.tenant_id)
        return record

    def update(self, record_id: int, changes: dict[str, Any]):
        with self.audit.track(self.principal, AuditAction.UPDATE, self.resource, record_id) as entry:
            record = self.fetch(record_id)
            self.authorize(Operation.UPDATE, record, changes)
            if changes.get("name") and changes["name"] != record.name:
                self._check_name(record.tenant_id, changes["name"], exclude_id=record.id)

            entry.old_values = self._snapshot(record)
            changes = dict(changes)
            self._set_relations(record, changes)
            self.apply_changes(record, changes)
            self._commit(record.name)
            self.db.refresh(record)
            entry.new_values = self._snapshot(record)

        logger.info(f"{self.label} updated", id=record.id)
        return record


class PermissionService(_NamedService):
    model = Permission
    resource = AuditResource.PERMISSION
    label = "Permission"


class RoleService(_NamedService):
    model = Role
    resource = AuditResource.ROLE
    label = "Role"

    def _build(self, tenant_id: int, values: dict[str, Any]) -> Role:
        return Role(tenant_id=tenant_id, name=values["name"], description=values.get("description"))

    def _set_relations(self, role: Role, values: dict[str, Any]) -> None:
        """Pops permission_ids from values and assigns the matching permissions."""
        permission_ids = values.pop("permission_ids", None)
        if permission_ids is None:
            return

        permission_ids = list(dict.fromkeys(permission_ids))
        permissions = (
            self.db.query(Permission)
            .filter(
                Permission.id.in_(permission_ids),
                Permission.tenant_id == role.tenant_id,
                Permission.is_active.is_(True),
            )
            .order_by(Permission.id)
            .all()
            if permission_ids
            else []
        )
        missing = set(permission_ids) - {permission.id for permission in permissions}
        if missing:
            raise ValidationAPIError(
                "Permissions must exist in the role's tenant",
                field="permissionIds",
                details={"ids": sorted(missing)},
            )
        role.permissions = permissions

    def _snapshot(self, role: Role) -> dict[str, Any]:
        values = snapshot(role)
        values["permissions"] = [permission.name for permission in role.permissions]
        return values
