"""User management (admin only) and sign-in."""

from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from sqlalchemy.orm import Query, Session

from api.middleware.error_handler import ConflictError, UnauthorizedError, ValidationAPIError
from api.models import AuditAction, AuditResource, AuditStatus, Role, User
from api.services.access import Operation, Principal
from api.services.audit import AuditTrail, snapshot
from api.services.lifecycle import LifecycleService
from api.services.passwords import hash_password, verify_password
from api.services.permissions import build_principal
from api.services.tenancy import require_tenant
from api.services.token import create_token, user_claims

logger = structlog.get_logger()


def user_snapshot(user: User) -> dict[str, Any]:
    values = snapshot(user)
    values["roles"] = [role.name for role in user.roles]
    return values


class UserService(LifecycleService):
    model = User
    resource = AuditResource.USER
    label = "User"

    def _roles(self, tenant_id: int, role_ids: list[int]) -> list[Role]:
        role_ids = list(dict.fromkeys(role_ids))
        if not role_ids:
            return []
        roles = (
            self.db.query(Role)
            .filter(Role.id.in_(role_ids), Role.tenant_id == tenant_id, Role.is_active.is_(True))
            .order_by(Role.id)
            .all()
        )
        missing = set(role_ids) - {role.id for role in roles}
        if missing:
            raise ValidationAPIError(
                "Roles must exist in the user's tenant",
                field="roleIds",
                details={"ids": sorted(missing)},
            )
        return roles

    def filter_list(self, query: Query, search: Optional[str] = None, **filters) -> Query:
        if search:
            query = query.filter(User.full_name.ilike(f"%{search}%") | User.email.ilike(f"%{search}%"))
        return query

    def create(self, values: dict[str, Any]) -> User:
        with self.audit.track(self.principal, AuditAction.CREATE, self.resource) as entry:
            self.authorize(Operation.CREATE, values)
            tenant_id = require_tenant(self.principal.tenant_id)

            email = values["email"].strip().lower()
            if self.db.query(User).filter(User.email == email).first():
                raise ConflictError("User", email)

            user = User(
                tenant_id=tenant_id,
                email=email,
                full_name=values["full_name"],
                password_hash=hash_password(values["password"]),
            )
            user.roles = self._roles(tenant_id, values.get("role_ids") or [])
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)

            entry.resource_id = user.id
            entry.new_values = user_snapshot(user)

        logger.info("User created", id=user.id, email=user.email, roles=[role.name for role in user.roles])
        return user


class AuthService:
    """Password sign-in and token issuing."""

    def __init__(self, db: Session, audit: Optional[AuditTrail] = None):
        self.db = db
        self.audit = audit or AuditTrail(db)

    def login(self, email: str, password: str) -> tuple[str, User, Principal]:
        """
        Check credentials and issue an access token.

        Unknown email, wrong password and inactive account all fail the same
        way.
        """
        user = self.db.query(User).filter(User.email == email.strip().lower()).first()

        if not user or not user.is_active or not verify_password(password, user.password_hash):
            logger.warning("Login failed", email=email)
            self.audit.record(
                AuditAction.LOGIN,
                AuditResource.USER,
                resource_id=user.id if user else None,
                user_id=user.id if user else None,
                tenant_id=user.tenant_id if user else None,
                new_values={"email": email},
                status=AuditStatus.ERROR,
                error_message="Invalid credentials",
            )
            raise UnauthorizedError("Invalid credentials")

        user.last_login_at = datetime.now(timezone.utc)
        self.db.commit()

        self.audit.record(
            AuditAction.LOGIN,
            AuditResource.USER,
            resource_id=user.id,
            user_id=user.id,
            tenant_id=user.tenant_id,
        )

        logger.info("User logged in", id=user.id, tenant_id=user.tenant_id)
        return create_token(user_claims(user)), user, build_principal(self.db, user)

    def refresh(self, principal: Principal) -> str:
        user = self.db.get(User, principal.user_id)
        return create_token(user_claims(user))
