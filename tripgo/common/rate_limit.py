"""Rate limiting configuration using slowapi.

Provides a module-level Limiter instance that routers import for
per-endpoint limits. main.py installs ``SlowAPIMiddleware`` so the default
limit covers every route, and renders 429s with ``rate_limit_exceeded_handler``.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from tripgo.common.exceptions import build_error_body

# Default: 120 requests/minute per client IP for all endpoints.
# Login and registration override with AUTH_RATE_LIMIT.
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["120/minute"],
)

AUTH_RATE_LIMIT = "10/minute"


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 in the standard error envelope.

    Must stay sync: SlowAPIMiddleware calls it without awaiting.
    """
    response = JSONResponse(
        status_code=429,
        content=build_error_body(
            request,
            status=429,
            error_type="rate-limited",
            title="Too Many Requests",
            detail=f"Rate limit exceeded: {exc.detail}",
        ),
    )
    view_rate_limit = getattr(request.state, "view_rate_limit", None)
    if view_rate_limit is not None:
        response = request.app.state.limiter._inject_headers(response, view_rate_limit)
    return response
