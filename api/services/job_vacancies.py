"""JobVacancy lifecycle.

A vacancy stores its own copy of the candidate data schema, taken from the
job template (or supplied by the caller) when the vacancy is created or
moved to another template.
"""

from typing import Any, Optional

import structlog
from sqlalchemy.orm import Query

from api.middleware.error_handler import NotFoundError, ValidationAPIError
from api.models import Agency, AuditAction, AuditResource, Candidate, Client, JobTemplate, JobVacancy
from api.services.access import Operation
from api.services.audit import snapshot
from api.services.lifecycle import LifecycleService
from api.services.tenancy import apply_tenant_scope, require_tenant
from api.services.template_schema import snapshot_schema

logger = structlog.get_logger()


class JobVacancyService(LifecycleService):
    model = JobVacancy
    resource = AuditResource.JOB_VACANCY
    label = "Job vacancy"
    required_fields = ("name", "client_id", "job_template_id", "candidate_data_schema")

    # -----------------
    # Reference checks
    # -----------------

    def _active(self, model, record_id: int):
        query = self.db.query(model).filter(model.id == record_id, model.is_active.is_(True))
        return apply_tenant_scope(query, model, self.principal.tenant_id).first()

    def _get_client(self, client_id: int) -> Client:
        client = self._active(Client, client_id)
        if not client:
            raise NotFoundError("Client", client_id)
        return client

    def _get_template(self, template_id: int, client_id: int) -> JobTemplate:
        template = self._active(JobTemplate, template_id)
        if not template:
            raise NotFoundError("Job template", template_id)
        if template.client_id != client_id:
            raise ValidationAPIError("Job template belongs to a different client", field="jobTemplateId")
        return template

    def _get_agencies(self, agency_ids: list[int]) -> list[Agency]:
        agency_ids = list(dict.fromkeys(agency_ids))
        if not agency_ids:
            return []
        query = self.db.query(Agency).filter(Agency.id.in_(agency_ids), Agency.is_active.is_(True))
        agencies = apply_tenant_scope(query, Agency, self.principal.tenant_id).order_by(Agency.id).all()
        missing = set(agency_ids) - {agency.id for agency in agencies}
        if missing:
            raise ValidationAPIError(
                "Unknown agencies",
                field="assignedAgencyIds",
                details={"ids": sorted(missing)},
            )
        return agencies

    # -----------------
    # Operations
    # -----------------

    def filter_list(self, query: Query, client_id: Optional[int] = None, **filters) -> Query:
        if client_id is not None:
            query = query.filter(JobVacancy.client_id == client_id)
        return query

    def create(self, values: dict[str, Any]) -> JobVacancy:
        with self.audit.track(self.principal, AuditAction.CREATE, self.resource) as entry:
            self.authorize(Operation.CREATE, values)
            tenant_id = require_tenant(self.principal.tenant_id)

            client = self._get_client(values["client_id"])
            template = self._get_template(values["job_template_id"], client.id)

            schema = values.get("candidate_data_schema")
            if schema is None:
                schema = template.candidate_data_schema

            vacancy = JobVacancy(
                tenant_id=tenant_id,
                client_id=client.id,
                job_template_id=template.id,
                created_by_id=self.principal.user_id,
                name=values["name"],
                description=values.get("description"),
                candidate_data_schema=snapshot_schema(schema),
            )
            vacancy.assigned_agencies = self._get_agencies(values.get("assigned_agency_ids") or [])
            self.db.add(vacancy)
            self.db.commit()
            self.db.refresh(vacancy)

            entry.resource_id = vacancy.id
            entry.new_values = self._snapshot(vacancy)

        logger.info(
            "Job vacancy created",
            id=vacancy.id,
            client_id=vacancy.client_id,
            job_template_id=vacancy.job_template_id,
            created_by=vacancy.created_by_id,
        )
        return vacancy

    def update(self, vacancy_id: int, changes: dict[str, Any]) -> JobVacancy:
        with self.audit.track(self.principal, AuditAction.UPDATE, self.resource, vacancy_id) as entry:
            vacancy = self.fetch(vacancy_id)
            self.authorize(Operation.UPDATE, vacancy, changes)

            changes = dict(changes)
            agency_ids = changes.pop("assigned_agency_ids", None)
            client_id = changes.get("client_id") or vacancy.client_id
            if changes.get("client_id") is not None:
                self._get_client(client_id)

            template_id = changes.get("job_template_id")
            if template_id is not None or client_id != vacancy.client_id:
                template = self._get_template(template_id or vacancy.job_template_id, client_id)
                if template_id is not None and changes.get("candidate_data_schema") is None:
                    changes["candidate_data_schema"] = template.candidate_data_schema

            if changes.get("candidate_data_schema") is not None:
                changes["candidate_data_schema"] = snapshot_schema(changes["candidate_data_schema"])

            entry.old_values = self._snapshot(vacancy)
            self.apply_changes(vacancy, changes)
            if agency_ids is not None:
                vacancy.assigned_agencies = self._get_agencies(agency_ids)
            self.db.commit()
            self.db.refresh(vacancy)
            entry.new_values = self._snapshot(vacancy)

        logger.info("Job vacancy updated", id=vacancy.id, fields=sorted(changes))
        return vacancy

    def list_candidates(self, vacancy_id: int, page: int = 1, per_page: int = 10) -> tuple[list[Candidate], int]:
        """Active candidates of a vacancy the principal may read."""
        vacancy = self.get(vacancy_id)

        query = self.db.query(Candidate).filter(
            Candidate.job_vacancy_id == vacancy.id,
            Candidate.is_active.is_(True),
        )
        query = apply_tenant_scope(query, Candidate, self.principal.tenant_id)

        total = query.count()
        items = query.order_by(Candidate.id).offset((page - 1) * per_page).limit(per_page).all()
        return items, total

    @staticmethod
    def _snapshot(vacancy: JobVacancy) -> dict[str, Any]:
        values = snapshot(vacancy)
        values["assigned_agency_ids"] = vacancy.assigned_agency_ids
        return values
