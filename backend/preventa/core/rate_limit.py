"""Rate limiting using SlowAPI.

Authenticated calls are limited per bearer token, anonymous ones per client
address, so users behind one NAT do not share a budget.
"""

import hashlib

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from preventa.config import get_settings
from preventa.core.error_handlers import error_response
from preventa.core.logging import get_logger

settings = get_settings()
logger = get_logger(__name__)


def get_request_identifier(request: Request) -> str:
    auth = request.headers.get("Authorization", "")
    if auth.lower().startswith("bearer ") and len(auth) > 7:
        digest = hashlib.sha256(auth[7:].encode()).hexdigest()[:16]
        return f"token:{digest}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_request_identifier,
    default_limits=[settings.rate_limit_default],
    enabled=settings.rate_limit_enabled,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("rate_limit_exceeded", path=request.url.path, limit=str(exc.detail))
    return error_response(
        429,
        "RATE_LIMIT_ERROR",
        f"Rate limit exceeded: {exc.detail}",
        {"retry_after": getattr(exc, "retry_after", None)},
    )
