"""Global exception handlers for the API."""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger()

REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(
        self,
        message: str,
        code: str = "API_ERROR",
        status_code: int = 400,
        details: dict = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class NotFoundError(APIError):
    """Resource not found (or outside the caller's tenant)."""

    def __init__(self, resource: str, identifier: str | int):
        super().__init__(
            message=f"{resource} not found",
            code="NOT_FOUND",
            status_code=404,
            details={"resource": resource, "id": identifier},
        )


class ValidationAPIError(APIError):
    """Validation error."""

    def __init__(self, message: str, field: str = None, details: dict = None):
        merged = {"field": field} if field else {}
        merged.update(details or {})
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=422,
            details=merged,
        )


class ForbiddenError(APIError):
    """Access forbidden."""

    def __init__(self, message: str = "You don't have permission to access this resource"):
        super().__init__(
            message=message,
            code="FORBIDDEN",
            status_code=403,
        )


class ConflictError(APIError):
    """Unique name already taken."""

    def __init__(self, resource: str, name: str):
        super().__init__(
            message=f"{resource} '{name}' already exists",
            code="CONFLICT",
            status_code=409,
            details={"resource": resource, "name": name},
        )


class UnauthorizedError(APIError):
    """Missing, invalid or expired credentials."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(
            message=message,
            code="UNAUTHORIZED",
            status_code=401,
        )


def error_body(code: str, message: str, details: dict = None) -> dict:
    """Standard error envelope shared by handlers and middleware."""
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
        }
    }


def setup_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        """Handle custom API errors."""
        logger.warning(
            "API error",
            code=exc.code,
            message=exc.message,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.code, exc.message, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle Pydantic validation errors, including malformed request input."""
        if isinstance(exc, ValidationError):
            errors = exc.errors(include_url=False, include_context=False)
        else:
            errors = jsonable_encoder(
                [{k: v for k, v in error.items() if k not in ("ctx", "url")} for error in exc.errors()]
            )
        first_error = errors[0] if errors else {}
        loc = [str(part) for part in first_error.get("loc", [])]
        if loc and loc[0] in REQUEST_LOCATIONS:
            loc = loc[1:]
        field = ".".join(loc)
        message = first_error.get("msg", "Validation error")

        logger.warning(
            "Validation error",
            field=field,
            message=message,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=422,
            content=error_body("VALIDATION_ERROR", message, {"field": field, "errors": errors}),
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        """Handle database errors."""
        logger.error(
            "Database error",
            error=str(exc),
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content=error_body("DATABASE_ERROR", "A database error occurred"),
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected errors."""
        logger.exception(
            "Unexpected error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content=error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )
