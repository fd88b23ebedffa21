"""Business logic services for the RMS API."""

from .token import create_token, decode_token, should_refresh_token
from .rbac import get_principal, require_role, require_admin

__all__ = [
    "create_token",
    "decode_token",
    "should_refresh_token",
    "get_principal",
    "require_role",
    "require_admin",
]
