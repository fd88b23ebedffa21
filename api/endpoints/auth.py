"""Authentication endpoints: password login, profile and token refresh."""

import structlog
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from api.config.database import get_db
from api.config.settings import settings
from api.models import AuditAction, AuditResource
from api.schemas.users import LoginRequest, ProfileResponse, TokenResponse
from api.services.access import Principal
from api.services.audit import AuditTrail, get_audit_trail
from api.services.rbac import get_principal
from api.services.users import AuthService

logger = structlog.get_logger()
router = APIRouter()


def set_token_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
        domain=settings.COOKIE_DOMAIN,
        path="/",  # Available for all paths
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


def profile(principal: Principal) -> ProfileResponse:
    return ProfileResponse(
        id=principal.user_id,
        tenant_id=principal.tenant_id,
        email=principal.email,
        full_name=principal.full_name,
        roles=sorted(principal.roles),
        permissions=sorted(principal.permissions),
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    audit: AuditTrail = Depends(get_audit_trail),
) -> TokenResponse:
    """
    Exchange email and password for an access token.

    The token is returned in the body and set as an HTTP-only cookie.
    """
    token, user, principal = AuthService(db, audit).login(data.email, data.password)
    set_token_cookie(response, token)

    return TokenResponse(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=profile(principal),
    )


@router.get("/me", response_model=ProfileResponse)
async def get_me(
    principal: Principal = Depends(get_principal),
) -> ProfileResponse:
    """
    Get current authenticated user profile.
    """
    return profile(principal)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    response: Response,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
) -> TokenResponse:
    """
    Refresh the current token.

    Creates a new token with extended expiration.
    """
    token = AuthService(db).refresh(principal)
    set_token_cookie(response, token)

    logger.info("Token refreshed", user=principal.user_id)
    return TokenResponse(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=profile(principal),
    )


@router.post("/logout", status_code=204)
async def logout(
    response: Response,
    principal: Principal = Depends(get_principal),
    audit: AuditTrail = Depends(get_audit_trail),
) -> None:
    """
    Logout user by clearing the auth cookie.
    """
    response.delete_cookie(key=settings.COOKIE_NAME, domain=settings.COOKIE_DOMAIN, path="/")
    audit.record(
        AuditAction.LOGOUT,
        AuditResource.USER,
        resource_id=principal.user_id,
        user_id=principal.user_id,
        tenant_id=principal.tenant_id,
    )

    logger.info("User logged out", user=principal.user_id)
