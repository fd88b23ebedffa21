"""Business audit trail for mutating operations.

Audit writes never abort the operation being audited: a failed audit insert
is rolled back and logged, and the caller sees the primary result or error.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterator, Optional

import structlog
from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.config.database import get_db
from api.middleware.security import get_client_ip
from api.models import AuditAction, AuditLog, AuditResource, AuditStatus

logger = structlog.get_logger()

SENSITIVE_KEYS = {
    "password",
    "password_hash",
    "passwordHash",
    "access_token",
    "accessToken",
    "refresh_token",
    "refreshToken",
}


def sanitize(value: Any) -> Any:
    """JSON-safe copy of value with sensitive keys removed at any depth."""
    if isinstance(value, dict):
        return {k: sanitize(v) for k, v in value.items() if k not in SENSITIVE_KEYS}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [sanitize(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def snapshot(record: Any) -> Optional[dict[str, Any]]:
    """Before/after image of a model row."""
    if record is None:
        return None
    if hasattr(record, "to_dict"):
        return sanitize(record.to_dict())
    return sanitize(dict(record))


@dataclass
class AuditEntry:
    """Mutable record of one audited operation, filled in as it runs."""

    action: AuditAction
    resource: AuditResource
    resource_id: Optional[int] = None
    old_values: Optional[dict[str, Any]] = None
    new_values: Optional[dict[str, Any]] = None


class AuditTrail:
    """Writes audit_logs rows for one request."""

    def __init__(
        self,
        db: Session,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ):
        self.db = db
        self.ip_address = ip_address
        self.user_agent = user_agent

    def record(
        self,
        action: AuditAction,
        resource: AuditResource,
        resource_id: Optional[int] = None,
        user_id: Optional[int] = None,
        tenant_id: Optional[int] = None,
        old_values: Optional[dict] = None,
        new_values: Optional[dict] = None,
        status: AuditStatus = AuditStatus.SUCCESS,
        error_message: Optional[str] = None,
    ) -> None:
        """Insert one audit row; failures are logged and swallowed."""
        try:
            self.db.add(
                AuditLog(
                    tenant_id=tenant_id,
                    user_id=user_id,
                    action=action.value,
                    resource=resource.value,
                    resource_id=resource_id,
                    old_values=sanitize(old_values),
                    new_values=sanitize(new_values),
                    ip_address=self.ip_address,
                    user_agent=self.user_agent[:500] if self.user_agent else None,
                    status=status.value,
                    error_message=error_message,
                )
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                "Failed to write audit log",
                action=action.value,
                resource=resource.value,
                resource_id=resource_id,
            )

    @contextmanager
    def track(
        self,
        principal,
        action: AuditAction,
        resource: AuditResource,
        resource_id: Optional[int] = None,
    ) -> Iterator[AuditEntry]:
        """
        Audit the block it wraps.

        The block fills in the yielded entry (ids, snapshots) and commits its
        own changes. If it raises, pending changes are rolled back, an ERROR
        row is written and the exception propagates unchanged.

        Usage:
            with audit.track(principal, AuditAction.UPDATE, AuditResource.CLIENT, client_id) as entry:
                entry.old_values = snapshot(client)
                ...
                db.commit()
                entry.new_values = snapshot(client)
        """
        entry = AuditEntry(action=action, resource=resource, resource_id=resource_id)
        try:
            yield entry
        except Exception as exc:
            self.db.rollback()
            self.record(
                action,
                resource,
                resource_id=entry.resource_id,
                user_id=principal.user_id,
                tenant_id=principal.tenant_id,
                old_values=entry.old_values,
                new_values=entry.new_values,
                status=AuditStatus.ERROR,
                error_message=str(exc),
            )
            raise

        self.record(
            action,
            resource,
            resource_id=entry.resource_id,
            user_id=principal.user_id,
            tenant_id=principal.tenant_id,
            old_values=entry.old_values,
            new_values=entry.new_values,
        )


def get_audit_trail(request: Request, db: Session = Depends(get_db)) -> AuditTrail:
    """Audit trail bound to the request's client IP and user agent."""
    return AuditTrail(
        db,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
