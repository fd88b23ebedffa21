"""Client lifecycle."""

from typing import Any, Optional

import structlog
from sqlalchemy.orm import Query

from api.middleware.error_handler import ValidationAPIError
from api.models import AuditAction, AuditResource, Client, User
from api.services.access import Operation
from api.services.audit import snapshot
from api.services.lifecycle import LifecycleService
from api.services.tenancy import apply_tenant_scope, require_tenant

logger = structlog.get_logger()


class ClientService(LifecycleService):
    """Clients are managed by admins and visible to their assigned employee."""

    model = Client
    resource = AuditResource.CLIENT
    label = "Client"
    required_fields = ("name", "assigned_employee_id")

    def _check_employee(self, user_id: int) -> None:
        query = self.db.query(User).filter(User.id == user_id, User.is_active.is_(True))
        if not apply_tenant_scope(query, User, self.principal.tenant_id).first():
            raise ValidationAPIError("Assigned employee not found", field="assignedEmployeeId")

    def filter_list(self, query: Query, search: Optional[str] = None, **filters) -> Query:
        if search:
            query = query.filter(Client.name.ilike(f"%{search}%"))
        return query

    def create(self, values: dict[str, Any]) -> Client:
        with self.audit.track(self.principal, AuditAction.CREATE, self.resource) as entry:
            self.authorize(Operation.CREATE, values)
            tenant_id = require_tenant(self.principal.tenant_id)
            self._check_employee(values["assigned_employee_id"])

            client = Client(**values, tenant_id=tenant_id)
            self.db.add(client)
            self.db.commit()
            self.db.refresh(client)

            entry.resource_id = client.id
            entry.new_values = snapshot(client)

        logger.info("Client created", id=client.id, name=client.name, tenant_id=client.tenant_id)
        return client

    def update(self, client_id: int, changes: dict[str, Any]) -> Client:
        with self.audit.track(self.principal, AuditAction.UPDATE, self.resource, client_id) as entry:
            client = self.fetch(client_id)
            self.authorize(Operation.UPDATE, client, changes)
            if changes.get("assigned_employee_id") is not None:
                self._check_employee(changes["assigned_employee_id"])

            entry.old_values = snapshot(client)
            self.apply_changes(client, changes)
            self.db.commit()
            self.db.refresh(client)
            entry.new_values = snapshot(client)

        logger.info("Client updated", id=client.id)
        return client
