"""SQLAlchemy ORM models for the RMS API.

All models are imported here to ensure they're registered with Base.metadata
before any database operations.
"""

# Import base first
from api.config.database import Base

# Tenancy and identity
from .tenants import Tenant
from .roles import Role, Permission, role_permissions
from .users import User, user_roles
from .agencies import Agency, agency_users

# Recruitment
from .clients import Client
from .job_templates import JobTemplate
from .job_vacancies import JobVacancy, vacancy_agencies
from .candidates import Candidate

# Audit
from .audit_logs import AuditLog, AuditAction, AuditResource, AuditStatus

__all__ = [
    "Base",
    # Tenancy and identity
    "Tenant",
    "Role",
    "Permission",
    "role_permissions",
    "User",
    "user_roles",
    "Agency",
    "agency_users",
    # Recruitment
    "Client",
    "JobTemplate",
    "JobVacancy",
    "vacancy_agencies",
    "Candidate",
    # Audit
    "AuditLog",
    "AuditAction",
    "AuditResource",
    "AuditStatus",
]
