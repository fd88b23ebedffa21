"""API endpoints for the RMS API."""

from fastapi import APIRouter

from .auth import router as auth_router
from .health import router as health_router
from .users import router as users_router
from .roles_permissions import router as roles_permissions_router
from .agencies import router as agencies_router
from .clients import router as clients_router
from .job_templates import router as job_templates_router
from .job_vacancies import router as job_vacancies_router
from .candidates import router as candidates_router
from .audit_logs import router as audit_logs_router

# Create main API router
api_router = APIRouter()

# Include all routers
api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
api_router.include_router(health_router, prefix="/health", tags=["Health"])
api_router.include_router(users_router, prefix="/users", tags=["Users"])
api_router.include_router(roles_permissions_router, prefix="/roles-permissions", tags=["Roles & Permissions"])
api_router.include_router(agencies_router, prefix="/agencies", tags=["Agencies"])
api_router.include_router(clients_router, prefix="/clients", tags=["Clients"])
api_router.include_router(job_templates_router, prefix="/job-templates", tags=["Job Templates"])
api_router.include_router(job_vacancies_router, prefix="/job-vacancies", tags=["Job Vacancies"])
api_router.include_router(candidates_router, prefix="/candidates", tags=["Candidates"])
api_router.include_router(audit_logs_router, prefix="/audit-logs", tags=["Audit Logs"])

__all__ = ["api_router"]
