"""Authentication middleware for JWT validation."""

import re
from typing import Optional

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from api.config.settings import settings
from api.middleware.error_handler import error_body
from api.services.token import decode_token, create_token, should_refresh_token

logger = structlog.get_logger()


# Paths that don't require authentication
SKIP_AUTH_PATHS = [
    r"^/api/v1/auth/login$",
    r"^/api/v1/health",
    r"^/health",
    r"^/$",
    r"^/api/docs",
    r"^/api/openapi\.json",
    r"^/api/redoc",
]

SKIP_AUTH_PATTERNS = [re.compile(p) for p in SKIP_AUTH_PATHS]


def should_skip_auth(path: str) -> bool:
    """Check if path should skip authentication."""
    return any(pattern.match(path) for pattern in SKIP_AUTH_PATTERNS)


def get_token_from_request(request: Request) -> Optional[str]:
    """Extract JWT token from request (Authorization header or cookie)."""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]

    return request.cookies.get(settings.COOKIE_NAME)


def unauthorized(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content=error_body("UNAUTHORIZED", message),
        headers={"WWW-Authenticate": "Bearer"},
    )


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that validates JWT tokens on protected routes."""

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request and validate authentication."""
        if should_skip_auth(request.url.path) or request.method == "OPTIONS":
            return await call_next(request)

        token = get_token_from_request(request)
        if not token:
            return unauthorized("Not authenticated")

        try:
            payload = decode_token(token)
        except Exception as e:
            logger.info("Rejected token", path=request.url.path, error=str(e))
            return unauthorized(str(e))

        # Store token claims in request state; the principal is built per endpoint
        request.state.user = payload
        request.state.user_id = payload.get("sub")
        request.state.tenant_id = payload.get("tenant_id")

        response = await call_next(request)

        # Rolling token refresh
        if should_refresh_token(payload) and not request.url.path.endswith("/auth/logout"):
            new_token = create_token(payload)
            response.set_cookie(
                key=settings.COOKIE_NAME,
                value=new_token,
                httponly=True,
                secure=settings.COOKIE_SECURE,
                samesite=settings.COOKIE_SAMESITE,
                domain=settings.COOKIE_DOMAIN,
                max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            )

        return response
