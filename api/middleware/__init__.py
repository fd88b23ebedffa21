"""Middleware for the RMS API."""

from .auth import AuthMiddleware
from .error_handler import setup_exception_handlers
from .logging import LoggingMiddleware
from .security import SecurityMiddleware

__all__ = ["AuthMiddleware", "setup_exception_handlers", "LoggingMiddleware", "SecurityMiddleware"]
