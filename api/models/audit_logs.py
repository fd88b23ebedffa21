"""AuditLog model for the business audit trail."""

from enum import Enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy import func

from api.config.database import Base


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    READ = "READ"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"


class AuditStatus(str, Enum):
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class AuditResource(str, Enum):
    USER = "USER"
    ROLE = "ROLE"
    PERMISSION = "PERMISSION"
    AGENCY = "AGENCY"
    CLIENT = "CLIENT"
    JOB_TEMPLATE = "JOB_TEMPLATE"
    JOB_VACANCY = "JOB_VACANCY"
    CANDIDATE = "CANDIDATE"


class AuditLog(Base):
    """
    Business audit trail.

    One row per mutating request, successful or not. Operational logs go
    through structlog, not here.
    """

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Who
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="SET NULL"), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # What happened
    action = Column(String(20), nullable=False)
    resource = Column(String(50), nullable=False)
    resource_id = Column(Integer, nullable=True)

    # Snapshots
    old_values = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)

    # Request context
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(500), nullable=True)

    # Outcome
    status = Column(String(20), nullable=False, default=AuditStatus.SUCCESS.value)
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        Index("idx_audit_logs_tenant_created", "tenant_id", "created_at"),
        Index("idx_audit_logs_user_created", "user_id", "created_at"),
        Index("idx_audit_logs_resource", "resource", "resource_id"),
    )

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, action={self.action}, resource={self.resource})>"
