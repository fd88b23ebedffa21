"""HS256 JWT access tokens."""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError, JWTError

from api.config.settings import settings
from api.models import User


def create_token(data: dict[str, Any], expires_delta: timedelta = None) -> str:
    """
    Create an HS256-signed JWT token.

    Args:
        data: Claims to include in the token
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    to_encode = {k: v for k, v in data.items() if k not in ("exp", "iat")}

    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode.update({
        "exp": expire,
        "iat": now,
    })

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def user_claims(user: User) -> dict[str, Any]:
    """Claims identifying a user; roles are re-read from the database per request."""
    return {
        "sub": str(user.id),
        "email": user.email,
        "tenant_id": user.tenant_id,
        "roles": [role.id for role in user.roles],
    }


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and validate an HS256-signed JWT token.

    Raises:
        JWTError: If token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
    except ExpiredSignatureError:
        raise JWTError("Token has expired")
    except JWTClaimsError as e:
        raise JWTError(f"Invalid token claims: {e}")
    except JWTError as e:
        raise JWTError(f"Invalid token: {e}")


def should_refresh_token(payload: dict[str, Any]) -> bool:
    """
    Check if token should be refreshed (less than 50% lifetime remaining).
    """
    exp = payload.get("exp")
    iat = payload.get("iat")

    if not exp or not iat:
        return False

    now = datetime.now(timezone.utc).timestamp()
    total_lifetime = exp - iat
    remaining = exp - now

    return remaining < (total_lifetime * 0.5)
