"""Role and permission resolution for signed-in users."""

from typing import Iterable

from sqlalchemy.orm import Session, selectinload

from api.models import Role, User
from api.services.access import Principal


def _active_roles(db: Session, role_ids: Iterable[int]) -> list[Role]:
    role_ids = list(role_ids)
    if not role_ids:
        return []
    return (
        db.query(Role)
        .options(selectinload(Role.permissions))
        .filter(Role.id.in_(role_ids), Role.is_active.is_(True))
        .order_by(Role.id)
        .all()
    )


def aggregate_permissions(db: Session, role_ids: Iterable[int]) -> list[str]:
    """
    Flatten roles into their active permission names.

    Inactive roles contribute nothing; duplicates are dropped, first seen wins.
    """
    seen: dict[str, None] = {}
    for role in _active_roles(db, role_ids):
        for permission in role.permissions:
            if permission.is_active:
                seen.setdefault(permission.name, None)
    return list(seen)


def active_role_names(db: Session, role_ids: Iterable[int]) -> list[str]:
    """Names of the active roles among role_ids."""
    return [role.name for role in _active_roles(db, role_ids)]


def build_principal(db: Session, user: User) -> Principal:
    """Rebuild the request principal from a user row."""
    role_ids = [role.id for role in user.roles]
    return Principal(
        user_id=user.id,
        tenant_id=user.tenant_id,
        roles=frozenset(active_role_names(db, role_ids)),
        permissions=frozenset(aggregate_permissions(db, role_ids)),
        email=user.email,
        full_name=user.full_name,
    )
