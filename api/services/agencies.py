"""Agency lifecycle (admin only)."""

from typing import Any, Optional

import structlog
from sqlalchemy.orm import Query

from api.middleware.error_handler import ValidationAPIError
from api.models import Agency, AuditAction, AuditResource, User
from api.services.access import Operation
from api.services.audit import snapshot
from api.services.lifecycle import LifecycleService
from api.services.tenancy import require_tenant

logger = structlog.get_logger()


class AgencyService(LifecycleService):
    model = Agency
    resource = AuditResource.AGENCY
    label = "Agency"
    required_fields = ("name",)

    def _members(self, tenant_id: int, user_ids: list[int]) -> list[User]:
        user_ids = list(dict.fromkeys(user_ids))
        if not user_ids:
            return []
        users = (
            self.db.query(User)
            .filter(User.id.in_(user_ids), User.tenant_id == tenant_id, User.is_active.is_(True))
            .order_by(User.id)
            .all()
        )
        missing = set(user_ids) - {user.id for user in users}
        if missing:
            raise ValidationAPIError(
                "Agency members must be active users of the tenant",
                field="userIds",
                details={"ids": sorted(missing)},
            )
        return users

    @staticmethod
    def _snapshot(agency: Agency) -> dict[str, Any]:
        values = snapshot(agency)
        values["user_ids"] = [user.id for user in agency.users]
        return values

    def filter_list(self, query: Query, search: Optional[str] = None, **filters) -> Query:
        if search:
            query = query.filter(Agency.name.ilike(f"%{search}%"))
        return query

    def create(self, values: dict[str, Any]) -> Agency:
        with self.audit.track(self.principal, AuditAction.CREATE, self.resource) as entry:
            self.authorize(Operation.CREATE, values)
            tenant_id = require_tenant(self.principal.tenant_id)

            values = dict(values)
            user_ids = values.pop("user_ids", None) or []
            agency = Agency(tenant_id=tenant_id, **values)
            agency.users = self._members(tenant_id, user_ids)
            self.db.add(agency)
            self.db.commit()
            self.db.refresh(agency)

            entry.resource_id = agency.id
            entry.new_values = self._snapshot(agency)

        logger.info("Agency created", id=agency.id, name=agency.name, members=len(agency.users))
        return agency

    def update(self, agency_id: int, changes: dict[str, Any]) -> Agency:
        with self.audit.track(self.principal, AuditAction.UPDATE, self.resource, agency_id) as entry:
            agency = self.fetch(agency_id)
            self.authorize(Operation.UPDATE, agency, changes)

            changes = dict(changes)
            user_ids = changes.pop("user_ids", None)

            entry.old_values = self._snapshot(agency)
            self.apply_changes(agency, changes)
            if user_ids is not None:
                agency.users = self._members(agency.tenant_id, user_ids)
            self.db.commit()
            self.db.refresh(agency)
            entry.new_values = self._snapshot(agency)

        logger.info("Agency updated", id=agency.id)
        return agency
