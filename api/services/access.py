"""Record-level access rules for tenant users.

Role gates alone are not enough here: employees only see clients assigned to
them (and everything hanging off those clients), and agency users only work
with vacancies their agency is assigned to and candidates they submitted.

| Resource      | Create                       | Read                           | Update                      | Delete            |
|---------------|------------------------------|--------------------------------|-----------------------------|-------------------|
| Client        | Admin                        | Admin; assigned Employee       | Admin                       | Admin             |
| JobTemplate   | Admin                        | Admin; Employee of its client  | never                       | Admin             |
| JobVacancy    | Admin; Employee of client    | Admin; Employee of its client  | Admin; creating Employee(*) | Admin; creator    |
| Candidate     | Agency assigned to vacancy   | Admin; creator; Employee(**)   | creating Agency user        | creating Agency   |
| everything else (roles, permissions, agencies, users, audit logs): Admin only |

(*) moving a vacancy to another client also needs access to that client.
(**) through vacancy -> client -> assigned employee.

Cross-entity lookups go through the ClientLookup / VacancyLookup /
AgencyLookup ports so the rules can be exercised without a database.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Protocol

import structlog
from sqlalchemy import false, or_, select
from sqlalchemy.orm import Query

from api.middleware.error_handler import ForbiddenError
from api.models import Candidate, Client, JobTemplate, JobVacancy
from api.models.audit_logs import AuditResource as Resource

logger = structlog.get_logger()


class RoleName(str, Enum):
    """Role names with record-level meaning."""

    ADMIN = "Admin"
    EMPLOYEE = "Employee"
    AGENCY = "Agency"


class Operation(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class Principal:
    """The authenticated actor of a request, rebuilt from the database each time."""

    user_id: int
    tenant_id: Optional[int] = None
    roles: frozenset[str] = field(default_factory=frozenset)
    permissions: frozenset[str] = field(default_factory=frozenset)
    email: Optional[str] = None
    full_name: Optional[str] = None

    def has_role(self, role: RoleName) -> bool:
        return role.value in self.roles

    @property
    def is_admin(self) -> bool:
        return self.has_role(RoleName.ADMIN)

    @property
    def is_employee(self) -> bool:
        return self.has_role(RoleName.EMPLOYEE)

    @property
    def is_agency(self) -> bool:
        return self.has_role(RoleName.AGENCY)


# =====================
# Lookup ports
# =====================


class ClientRef(Protocol):
    id: int
    assigned_employee_id: int


class VacancyRef(Protocol):
    id: int
    client_id: int
    assigned_agency_ids: list[int]


class ClientLookup(Protocol):
    def get_client(self, client_id: int) -> Optional[ClientRef]:
        ...


class VacancyLookup(Protocol):
    def get_vacancy(self, vacancy_id: int) -> Optional[VacancyRef]:
        ...


class AgencyLookup(Protocol):
    def agency_ids_for_user(self, user_id: int) -> set[int]:
        ...


ADMIN_ONLY = {
    Resource.ROLE,
    Resource.PERMISSION,
    Resource.AGENCY,
    Resource.USER,
}

DENIAL_MESSAGES = {
    (Resource.CLIENT, Operation.CREATE): "Only admins can create clients",
    (Resource.CLIENT, Operation.READ): "You do not have access to this client",
    (Resource.CLIENT, Operation.UPDATE): "Only admins can update clients",
    (Resource.CLIENT, Operation.DELETE): "Only admins can delete clients",
    (Resource.JOB_TEMPLATE, Operation.CREATE): "Only admins can create job templates",
    (Resource.JOB_TEMPLATE, Operation.READ): "You do not have access to this job template",
    (Resource.JOB_TEMPLATE, Operation.UPDATE): "Job templates cannot be modified",
    (Resource.JOB_TEMPLATE, Operation.DELETE): "Only admins can delete job templates",
    (Resource.JOB_VACANCY, Operation.CREATE): "You can only create job vacancies for your assigned clients",
    (Resource.JOB_VACANCY, Operation.READ): "You do not have access to this job vacancy",
    (Resource.JOB_VACANCY, Operation.UPDATE): "You can only update job vacancies you created for your assigned clients",
    (Resource.JOB_VACANCY, Operation.DELETE): "You can only delete job vacancies you created",
    (Resource.CANDIDATE, Operation.CREATE): "You can only add candidates to jobs assigned to your agency",
    (Resource.CANDIDATE, Operation.READ): "You do not have access to this candidate",
    (Resource.CANDIDATE, Operation.UPDATE): "You can only update candidates you created",
    (Resource.CANDIDATE, Operation.DELETE): "You can only delete candidates you created",
}


def _ref_id(value: Any) -> Optional[int]:
    """Read an id from either an object or a mapping."""
    if value is None:
        return None
    if isinstance(value, Mapping):
        return value.get("id")
    return getattr(value, "id", None)


def _attr(target: Any, name: str) -> Any:
    if isinstance(target, Mapping):
        return target.get(name)
    return getattr(target, name, None)


class AccessScopeResolver:
    """Decides whether a principal may perform an operation on a record."""

    def __init__(
        self,
        clients: ClientLookup,
        vacancies: VacancyLookup,
        agencies: AgencyLookup,
    ):
        self.clients = clients
        self.vacancies = vacancies
        self.agencies = agencies

    # -----------------
    # Relationship checks
    # -----------------

    def employee_has_client(self, principal: Principal, client_id: Optional[int]) -> bool:
        """Employee access to a client: the client is assigned to them."""
        if client_id is None:
            return False
        client = self.clients.get_client(client_id)
        return client is not None and client.assigned_employee_id == principal.user_id

    def agency_has_vacancy(self, principal: Principal, vacancy: Optional[VacancyRef]) -> bool:
        """Agency access to a vacancy: one of the user's agencies is assigned to it."""
        if vacancy is None or not vacancy.assigned_agency_ids:
            return False
        agency_ids = self.agencies.agency_ids_for_user(principal.user_id)
        return bool(agency_ids.intersection(vacancy.assigned_agency_ids))

    # -----------------
    # Per-resource rules
    # -----------------

    def _client_rule(self, principal: Principal, operation: Operation, target: Any, changes: Mapping) -> bool:
        if principal.is_admin:
            return True
        if operation is Operation.READ and principal.is_employee:
            return _attr(target, "assigned_employee_id") == principal.user_id
        return False

    def _template_rule(self, principal: Principal, operation: Operation, target: Any, changes: Mapping) -> bool:
        if operation is Operation.UPDATE:
            return False
        if principal.is_admin:
            return True
        if operation is Operation.READ and principal.is_employee:
            return self.employee_has_client(principal, _attr(target, "client_id"))
        return False

    def _vacancy_rule(self, principal: Principal, operation: Operation, target: Any, changes: Mapping) -> bool:
        if principal.is_admin:
            return True
        if not principal.is_employee:
            return False

        if operation in (Operation.CREATE, Operation.READ):
            return self.employee_has_client(principal, _attr(target, "client_id"))

        if _attr(target, "created_by_id") != principal.user_id:
            return False
        if operation is Operation.UPDATE and changes.get("client_id") is not None:
            return self.employee_has_client(principal, changes["client_id"])
        return True

    def _candidate_rule(self, principal: Principal, operation: Operation, target: Any, changes: Mapping) -> bool:
        if operation is Operation.CREATE:
            if not principal.is_agency:
                return False
            vacancy = self.vacancies.get_vacancy(_attr(target, "job_vacancy_id"))
            return self.agency_has_vacancy(principal, vacancy)

        created_by_self = _attr(target, "created_by_id") == principal.user_id
        if operation in (Operation.UPDATE, Operation.DELETE):
            return principal.is_agency and created_by_self

        if principal.is_admin:
            return True
        if principal.is_agency and created_by_self:
            return True
        if principal.is_employee:
            vacancy = self.vacancies.get_vacancy(_attr(target, "job_vacancy_id"))
            return vacancy is not None and self.employee_has_client(principal, vacancy.client_id)
        return False

    # -----------------
    # Public API
    # -----------------

    def can_access(
        self,
        principal: Principal,
        operation: Operation,
        resource: Resource,
        target: Any = None,
        changes: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        """
        Check a single operation.

        Args:
            principal: Acting user
            operation: create/read/update/delete
            resource: Kind of record
            target: Existing record (read/update/delete) or the draft being created
            changes: Fields being changed by an update

        Returns:
            True if allowed
        """
        changes = changes or {}
        if resource in ADMIN_ONLY:
            return principal.is_admin
        if resource is Resource.CLIENT:
            return self._client_rule(principal, operation, target, changes)
        if resource is Resource.JOB_TEMPLATE:
            return self._template_rule(principal, operation, target, changes)
        if resource is Resource.JOB_VACANCY:
            return self._vacancy_rule(principal, operation, target, changes)
        if resource is Resource.CANDIDATE:
            return self._candidate_rule(principal, operation, target, changes)
        return False

    def authorize(
        self,
        principal: Principal,
        operation: Operation,
        resource: Resource,
        target: Any = None,
        changes: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Same as can_access, raising ForbiddenError on denial."""
        if self.can_access(principal, operation, resource, target, changes):
            return

        logger.warning(
            "Access denied",
            user=principal.user_id,
            roles=sorted(principal.roles),
            operation=operation.value,
            resource=resource.value,
            target_id=_ref_id(target),
        )
        message = DENIAL_MESSAGES.get(
            (resource, operation),
            "You don't have permission to access this resource",
        )
        raise ForbiddenError(message)

    # -----------------
    # List scoping
    # -----------------

    @staticmethod
    def scope_query(query: Query, principal: Principal, resource: Resource) -> Query:
        """
        Restrict a list query to the records the principal may read.

        Roles combine: a user holding several roles sees the union.
        """
        if principal.is_admin:
            return query
        if resource in ADMIN_ONLY:
            return query.filter(false())

        employee_clients = select(Client.id).where(
            Client.assigned_employee_id == principal.user_id,
            Client.is_active.is_(True),
        )
        criteria = []

        if resource is Resource.CLIENT and principal.is_employee:
            criteria.append(Client.assigned_employee_id == principal.user_id)
        elif resource is Resource.JOB_TEMPLATE and principal.is_employee:
            criteria.append(JobTemplate.client_id.in_(employee_clients))
        elif resource is Resource.JOB_VACANCY and principal.is_employee:
            criteria.append(JobVacancy.client_id.in_(employee_clients))
        elif resource is Resource.CANDIDATE:
            if principal.is_agency:
                criteria.append(Candidate.created_by_id == principal.user_id)
            if principal.is_employee:
                employee_vacancies = select(JobVacancy.id).where(
                    JobVacancy.client_id.in_(employee_clients)
                )
                criteria.append(Candidate.job_vacancy_id.in_(employee_vacancies))

        if not criteria:
            return query.filter(false())
        return query.filter(or_(*criteria))


def has_any_role(principal: Principal, roles: Iterable[RoleName]) -> bool:
    return any(principal.has_role(role) for role in roles)
