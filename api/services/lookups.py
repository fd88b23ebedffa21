"""SQLAlchemy-backed lookups used by the access resolver."""

from typing import Optional

from sqlalchemy.orm import Session

from api.models import Agency, Client, JobVacancy, User
from api.services.access import AccessScopeResolver
from api.services.tenancy import apply_tenant_scope


class SqlLookups:
    """Client, vacancy and agency lookups within one tenant."""

    def __init__(self, db: Session, tenant_id: Optional[int]):
        self.db = db
        self.tenant_id = tenant_id

    def get_client(self, client_id: int) -> Optional[Client]:
        """Active client by id. A soft-deleted client grants no employee access."""
        query = self.db.query(Client).filter(Client.id == client_id, Client.is_active.is_(True))
        return apply_tenant_scope(query, Client, self.tenant_id).first()

    def get_vacancy(self, vacancy_id: int) -> Optional[JobVacancy]:
        query = self.db.query(JobVacancy).filter(JobVacancy.id == vacancy_id)
        return apply_tenant_scope(query, JobVacancy, self.tenant_id).first()

    def agency_ids_for_user(self, user_id: int) -> set[int]:
        query = (
            self.db.query(Agency.id)
            .join(Agency.users)
            .filter(User.id == user_id, Agency.is_active.is_(True))
        )
        return {agency_id for (agency_id,) in apply_tenant_scope(query, Agency, self.tenant_id).all()}


def build_resolver(db: Session, tenant_id: Optional[int]) -> AccessScopeResolver:
    """Resolver wired to the database for one request."""
    lookups = SqlLookups(db, tenant_id)
    return AccessScopeResolver(clients=lookups, vacancies=lookups, agencies=lookups)
