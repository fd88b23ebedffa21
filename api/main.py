"""
RMS API - FastAPI Application

Main entry point for the API server.
Run with: uvicorn api.main:app --reload
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from api.config.settings import settings
from api.config.database import get_db, init_db
from api.endpoints import api_router
from api.endpoints.health import check_database
from api.middleware.auth import AuthMiddleware
from api.middleware.error_handler import setup_exception_handlers
from api.middleware.logging import LoggingMiddleware, configure_logging
from api.middleware.security import SecurityMiddleware
from api.schemas.base import ErrorResponse

# Configure structured logging
configure_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    logger.info(
        "Starting RMS API",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        environment=settings.ENVIRONMENT,
    )

    # Initialize database tables (in dev mode)
    if settings.DEBUG:
        logger.info("Initializing database tables (DEBUG mode)")
        try:
            init_db()
        except Exception as e:
            logger.error("Failed to initialize database", error=str(e))

    yield

    # Shutdown
    logger.info("Shutting down RMS API")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Multi-tenant recruitment management: clients, job templates, vacancies and candidates",
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
    openapi_url="/api/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan,
)

# Setup exception handlers
setup_exception_handlers(app)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add security middleware (throttling, security headers); sits inside auth,
# which must set request.state.user before throttle keys are computed
app.add_middleware(SecurityMiddleware)

# Add authentication middleware
app.add_middleware(AuthMiddleware)

# Add logging middleware (outermost)
app.add_middleware(LoggingMiddleware)

# Include API routes
app.include_router(
    api_router,
    prefix="/api/v1",
    responses={
        status: {"model": ErrorResponse}
        for status in (400, 401, 403, 404, 409, 422, 429)
    },
)


# Root health endpoint (for load balancers)
@app.get("/health")
async def root_health(db: Session = Depends(get_db)):
    """Simple health check for load balancer."""
    db_status, _ = check_database(db)
    return {
        "status": "ok" if db_status == "connected" else "degraded",
        "version": settings.APP_VERSION,
        "database": db_status,
    }


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/api/docs" if settings.DEBUG else None,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
