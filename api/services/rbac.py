"""Request principal and role gates for API endpoints."""

from typing import Any, Callable

import structlog
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from api.config.database import get_db
from api.middleware.error_handler import ForbiddenError, UnauthorizedError
from api.models import User
from api.services.access import Principal, RoleName, has_any_role
from api.services.permissions import build_principal

logger = structlog.get_logger()


def get_token_payload(request: Request) -> dict[str, Any]:
    """Decoded token claims stored by the auth middleware."""
    payload = getattr(request.state, "user", None)
    if not payload:
        raise UnauthorizedError()
    return payload


def get_principal(
    request: Request,
    db: Session = Depends(get_db),
) -> Principal:
    """
    Rebuild the principal for this request from User, Role and Permission rows.

    Usage:
        @router.get("/me")
        def get_me(principal: Principal = Depends(get_principal)):
            return principal
    """
    payload = get_token_payload(request)
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid token subject")

    user = db.get(User, user_id)
    if not user or not user.is_active:
        logger.warning("Token for missing or inactive user", user=user_id)
        raise UnauthorizedError()

    principal = build_principal(db, user)
    request.state.principal = principal
    return principal


def require_role(allowed_roles: list[RoleName]) -> Callable:
    """
    Dependency that requires the principal to hold one of the given roles.

    Usage:
        @router.post("/admin-only")
        def admin_endpoint(principal: Principal = Depends(require_role([RoleName.ADMIN]))):
            return {"message": "Admin access granted"}
    """

    def check_role(principal: Principal = Depends(get_principal)) -> Principal:
        if has_any_role(principal, allowed_roles):
            return principal

        logger.warning(
            "Role check failed",
            user=principal.user_id,
            required=[role.value for role in allowed_roles],
            user_roles=sorted(principal.roles),
        )
        raise ForbiddenError()

    return check_role


require_admin = require_role([RoleName.ADMIN])
