"""Security middleware: request throttling and security headers.

Requests are counted per identity (user id when authenticated, client IP
otherwise) over a sliding window of THROTTLE_TTL seconds.
"""

import ipaddress
import time
from collections import defaultdict
from typing import Dict

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from api.config.settings import settings
from api.middleware.error_handler import error_body

logger = structlog.get_logger()

# Trusted proxy networks (configure based on your infrastructure)
TRUSTED_PROXIES = [
    ipaddress.ip_network("127.0.0.1/32"),
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
]


class InMemoryRateLimiter:
    """Sliding-window rate limiter kept in process memory.

    Note: This is per-process and won't work correctly with multiple
    workers or containers.
    """

    # Max age for stale entries (1 hour)
    STALE_ENTRY_AGE = 3600
    # Cleanup interval (every 100 requests)
    CLEANUP_INTERVAL = 100

    def __init__(self, clock=time.time):
        self._requests: Dict[str, list] = defaultdict(list)
        self._request_count = 0
        self._clock = clock

    def _cleanup_old_requests(self, key: str, window_seconds: int) -> None:
        """Remove requests older than the window."""
        cutoff = self._clock() - window_seconds
        self._requests[key] = [t for t in self._requests[key] if t > cutoff]

    def _periodic_cleanup(self) -> None:
        """Periodically drop idle keys to prevent memory leaks."""
        self._request_count += 1
        if self._request_count < self.CLEANUP_INTERVAL:
            return

        self._request_count = 0
        cutoff = self._clock() - self.STALE_ENTRY_AGE
        stale_keys = [
            key for key, timestamps in self._requests.items()
            if not timestamps or max(timestamps) < cutoff
        ]
        for key in stale_keys:
            del self._requests[key]

    def is_rate_limited(self, key: str, limit: int, window: int = 60) -> bool:
        """Check if the key has exceeded the rate limit, counting this request if not.

        Args:
            key: Identity key (user:id or ip:address)
            limit: Max requests allowed
            window: Window in seconds

        Returns:
            True if rate limited
        """
        self._periodic_cleanup()
        self._cleanup_old_requests(key, window)

        if len(self._requests[key]) >= limit:
            return True

        self._requests[key].append(self._clock())
        return False

    def reset(self) -> None:
        self._requests.clear()
        self._request_count = 0


# Global rate limiter instance
rate_limiter = InMemoryRateLimiter()


def is_trusted_proxy(ip: str) -> bool:
    """Check if IP is a trusted proxy."""
    try:
        addr = ipaddress.ip_address(ip)
        return any(addr in net for net in TRUSTED_PROXIES)
    except ValueError:
        return False


def get_client_ip(request: Request) -> str:
    """Client IP, reading X-Forwarded-For only when the peer is a trusted proxy.

    Walks the forwarded chain from the right and returns the first untrusted
    address, so prepended fake IPs are ignored.
    """
    client_host = request.client.host if request.client else "unknown"

    if is_trusted_proxy(client_host):
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            ips = [ip.strip() for ip in forwarded.split(",")]
            for ip in reversed(ips):
                if ip and not is_trusted_proxy(ip):
                    return ip
            if ips and ips[0]:
                return ips[0]

    return client_host


def get_identity(request: Request) -> str:
    """Throttle key: user id if authenticated, otherwise IP."""
    user = getattr(request.state, "user", None)
    if user and user.get("sub"):
        return f"user:{user['sub']}"

    return f"ip:{get_client_ip(request)}"


class SecurityMiddleware(BaseHTTPMiddleware):
    """Throttles requests and adds security headers."""

    def __init__(self, app, limiter: InMemoryRateLimiter = None):
        super().__init__(app)
        self.limiter = limiter or rate_limiter

    async def dispatch(self, request: Request, call_next) -> Response:
        if settings.THROTTLE_ENABLED:
            identity = get_identity(request)
            if self._is_throttled(request, identity):
                logger.warning("Request throttled", identity=identity, path=request.url.path)
                return JSONResponse(
                    status_code=429,
                    content=error_body("TOO_MANY_REQUESTS", "Too many requests. Please try again later."),
                    headers={"Retry-After": str(settings.THROTTLE_TTL)},
                )

        response = await call_next(request)
        self._add_security_headers(response)
        return response

    def _is_throttled(self, request: Request, identity: str) -> bool:
        """Auth endpoints get a stricter bucket than the rest of the API."""
        if "/auth/" in request.url.path:
            return self.limiter.is_rate_limited(
                f"{identity}:auth", limit=settings.AUTH_THROTTLE_LIMIT, window=settings.THROTTLE_TTL
            )
        return self.limiter.is_rate_limited(
            f"{identity}:api", limit=settings.THROTTLE_LIMIT, window=settings.THROTTLE_TTL
        )

    def _add_security_headers(self, response: Response) -> None:
        """Add security headers to response."""
        if settings.ENVIRONMENT == "production":
            response.headers["Strict-Transport-Security"] = "max-age=63072000; includeSubDomains"

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
