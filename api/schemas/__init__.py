"""Pydantic schemas for API request/response validation.

All schemas use CamelCase for JSON field names (via alias_generator).
"""

from .base import CamelModel, PaginatedResponse, PaginationMeta, ErrorResponse, paginate

# Re-export all schemas
from .clients import ClientCreate, ClientUpdate, ClientResponse
from .job_templates import TemplateField, TemplateSchema, JobTemplateCreate, JobTemplateResponse
from .job_vacancies import JobVacancyCreate, JobVacancyUpdate, JobVacancyResponse
from .candidates import CandidateCreate, CandidateUpdate, CandidateResponse
from .roles import (
    PermissionCreate,
    PermissionUpdate,
    PermissionResponse,
    RoleCreate,
    RoleUpdate,
    RoleResponse,
)
from .users import (
    UserSummary,
    UserCreate,
    UserResponse,
    LoginRequest,
    ProfileResponse,
    TokenResponse,
)
from .agencies import AgencyCreate, AgencyUpdate, AgencyResponse
from .audit_logs import AuditLogResponse

__all__ = [
    # Base
    "CamelModel",
    "PaginatedResponse",
    "PaginationMeta",
    "ErrorResponse",
    "paginate",
    # Clients
    "ClientCreate",
    "ClientUpdate",
    "ClientResponse",
    # Job templates
    "TemplateField",
    "TemplateSchema",
    "JobTemplateCreate",
    "JobTemplateResponse",
    # Job vacancies
    "JobVacancyCreate",
    "JobVacancyUpdate",
    "JobVacancyResponse",
    # Candidates
    "CandidateCreate",
    "CandidateUpdate",
    "CandidateResponse",
    # Roles and permissions
    "PermissionCreate",
    "PermissionUpdate",
    "PermissionResponse",
    "RoleCreate",
    "RoleUpdate",
    "RoleResponse",
    # Users and auth
    "UserSummary",
    "UserCreate",
    "UserResponse",
    "LoginRequest",
    "ProfileResponse",
    "TokenResponse",
    # Agencies
    "AgencyCreate",
    "AgencyUpdate",
    "AgencyResponse",
    # Audit
    "AuditLogResponse",
]
