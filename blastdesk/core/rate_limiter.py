"""
Rate Limiting for the BlastDesk API
===================================
Implements rate limiting using slowapi. Storage defaults to in-process memory;
point RATE_LIMIT_STORAGE_URI at a shared backend when running several workers.

Special endpoints have their own limits:
- /login: 5 req/min (brute force protection)
- /register: 3 req/min
- /send-verification-code: 3 req/min (each call sends a real email)
- /unsubscribe: 10 req/min (public, no login)
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from blastdesk.core.config import settings
from blastdesk.core.logging_config import logger


LOGIN_LIMIT = "5/minute"
REGISTER_LIMIT = "3/minute"
VERIFICATION_LIMIT = "3/minute"
UNSUBSCRIBE_LIMIT = "10/minute"


def get_user_identifier(request: Request) -> str:
    """
    Get rate limit key.

    Authenticated callers are keyed by user id (set on request.state by the
    auth dependency), everyone else by IP address.
    """
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"

    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_user_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
    strategy="fixed-window",
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """
    Custom handler for rate limit exceeded errors.

    Returns the standard error body plus a Retry-After header.
    """
    retry_after = "60"

    logger.warning(
        f"[RateLimit] Exceeded for {get_user_identifier(request)}: {exc.detail}",
        extra={"event_type": "rate_limit", "http_path": request.url.path}
    )

    return JSONResponse(
        status_code=429,
        content={
            "error": "Too many requests. Please slow down.",
            "code": "RATE_LIMIT_EXCEEDED",
            "details": {"limit": str(exc.detail)},
        },
        headers={"Retry-After": retry_after},
    )
