"""JobTemplate lifecycle. Templates are immutable once created."""

from typing import Any, Optional

import structlog
from sqlalchemy.orm import Query

from api.middleware.error_handler import ForbiddenError, NotFoundError
from api.models import AuditAction, AuditResource, Client, JobTemplate
from api.services.access import Operation
from api.services.audit import snapshot
from api.services.lifecycle import LifecycleService
from api.services.tenancy import apply_tenant_scope, require_tenant
from api.services.template_schema import snapshot_schema

logger = structlog.get_logger()


class JobTemplateService(LifecycleService):
    model = JobTemplate
    resource = AuditResource.JOB_TEMPLATE
    label = "Job template"

    def filter_list(self, query: Query, client_id: Optional[int] = None, **filters) -> Query:
        if client_id is None:
            return query

        if not self.principal.is_admin and not self.resolver.employee_has_client(self.principal, client_id):
            raise ForbiddenError("You do not have access to this client's templates")
        return query.filter(JobTemplate.client_id == client_id)

    def create(self, values: dict[str, Any]) -> JobTemplate:
        with self.audit.track(self.principal, AuditAction.CREATE, self.resource) as entry:
            self.authorize(Operation.CREATE, values)
            tenant_id = require_tenant(self.principal.tenant_id)

            client_query = self.db.query(Client).filter(
                Client.id == values["client_id"],
                Client.is_active.is_(True),
            )
            if not apply_tenant_scope(client_query, Client, tenant_id).first():
                raise NotFoundError("Client", values["client_id"])

            template = JobTemplate(
                tenant_id=tenant_id,
                client_id=values["client_id"],
                name=values["name"],
                description=values.get("description"),
                candidate_data_schema=snapshot_schema(values.get("candidate_data_schema")),
            )
            self.db.add(template)
            self.db.commit()
            self.db.refresh(template)

            entry.resource_id = template.id
            entry.new_values = snapshot(template)

        logger.info(
            "Job template created",
            id=template.id,
            client_id=template.client_id,
            fields=len(template.candidate_data_schema),
        )
        return template
