"""Candidate lifecycle.

Candidate data is validated against the owning vacancy's schema copy, after
the access check so an unauthorized caller never learns about the schema.
"""

from typing import Any, Optional

import structlog
from sqlalchemy.orm import Query

from api.middleware.error_handler import NotFoundError
from api.models import AuditAction, AuditResource, Candidate, JobVacancy
from api.services.access import Operation
from api.services.audit import snapshot
from api.services.lifecycle import LifecycleService
from api.services.tenancy import apply_tenant_scope, require_tenant
from api.services.template_schema import validate_candidate_data

logger = structlog.get_logger()


class CandidateService(LifecycleService):
    model = Candidate
    resource = AuditResource.CANDIDATE
    label = "Candidate"
    required_fields = ("data",)

    def _get_vacancy(self, vacancy_id: int) -> JobVacancy:
        query = self.db.query(JobVacancy).filter(
            JobVacancy.id == vacancy_id,
            JobVacancy.is_active.is_(True),
        )
        vacancy = apply_tenant_scope(query, JobVacancy, self.principal.tenant_id).first()
        if not vacancy:
            raise NotFoundError("Job vacancy", vacancy_id)
        return vacancy

    def filter_list(self, query: Query, job_vacancy_id: Optional[int] = None, **filters) -> Query:
        if job_vacancy_id is not None:
            query = query.filter(Candidate.job_vacancy_id == job_vacancy_id)
        return query

    def create(self, values: dict[str, Any]) -> Candidate:
        with self.audit.track(self.principal, AuditAction.CREATE, self.resource) as entry:
            vacancy = self._get_vacancy(values["job_vacancy_id"])
            self.authorize(Operation.CREATE, {"job_vacancy_id": vacancy.id})
            tenant_id = require_tenant(self.principal.tenant_id)

            data = values.get("data") or {}
            validate_candidate_data(data, vacancy.candidate_data_schema)

            candidate = Candidate(
                tenant_id=tenant_id,
                job_vacancy_id=vacancy.id,
                created_by_id=self.principal.user_id,
                data=data,
            )
            self.db.add(candidate)
            self.db.commit()
            self.db.refresh(candidate)

            entry.resource_id = candidate.id
            entry.new_values = snapshot(candidate)

        logger.info(
            "Candidate created",
            id=candidate.id,
            job_vacancy_id=candidate.job_vacancy_id,
            created_by=candidate.created_by_id,
        )
        return candidate

    def update(self, candidate_id: int, changes: dict[str, Any]) -> Candidate:
        with self.audit.track(self.principal, AuditAction.UPDATE, self.resource, candidate_id) as entry:
            candidate = self.fetch(candidate_id)
            self.authorize(Operation.UPDATE, candidate, changes)

            if changes.get("data") is not None:
                vacancy = self._get_vacancy(candidate.job_vacancy_id)
                validate_candidate_data(changes["data"], vacancy.candidate_data_schema)

            entry.old_values = snapshot(candidate)
            self.apply_changes(candidate, changes)
            self.db.commit()
            self.db.refresh(candidate)
            entry.new_values = snapshot(candidate)

        logger.info("Candidate updated", id=candidate.id)
        return candidate
