"""Rate limiting middleware."""

import logging
from typing import Callable, Optional, Sequence, Tuple

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from temperature_service.config import (
    RATE_LIMIT_API_REQUESTS,
    RATE_LIMIT_ENABLED,
    RATE_LIMIT_SEARCH_REQUESTS
)
from temperature_service.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

# (path prefix, limiter) pairs; every matching rule is checked
Rule = Tuple[str, RateLimiter]


def default_rules() -> list[Rule]:
    """General API limit plus a stricter one for location search."""
    return [
        ("/api", RateLimiter("api", RATE_LIMIT_API_REQUESTS)),
        ("/api/search", RateLimiter("search", RATE_LIMIT_SEARCH_REQUESTS)),
    ]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """FastAPI middleware enforcing per-client rate limits on API routes.

    Returns HTTP 429 when any matching limit is exceeded.
    """

    def __init__(
        self,
        app,
        rules: Optional[Sequence[Rule]] = None,
        enabled: bool = RATE_LIMIT_ENABLED
    ):
        """Initialize rate limit middleware.

        Args:
            app: FastAPI application instance
            rules: Path-prefix limiters (defaults to ``default_rules()``)
            enabled: Whether limits are enforced at all
        """
        super().__init__(app)
        self.enabled = enabled
        self.rules = list(rules) if rules is not None else (default_rules() if enabled else [])
        logger.info(
            f"Rate limit enabled: {self.enabled}, limits: "
            + ", ".join(f"{prefix}={limiter.max_requests}/{limiter.window_size:g}s" for prefix, limiter in self.rules)
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request through rate limiting check.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/endpoint in chain

        Returns:
            HTTP response (either rate limit error or continued response)
        """
        if not self.enabled:
            return await call_next(request)

        path = request.url.path
        matching = [limiter for prefix, limiter in self.rules if path.startswith(prefix)]
        if not matching:
            return await call_next(request)

        client_id = request.client.host if request.client else "unknown"

        for limiter in matching:
            is_allowed, retry_after = await limiter.is_allowed(client_id)
            if not is_allowed:
                logger.warning(f"Rate limit '{limiter.scope}' exceeded for {client_id} accessing {request.method} {path}")
                return JSONResponse(
                    status_code=429,
                    content={
                        "error": "RateLimited",
                        "message": "Too many requests from this IP, please try again later.",
                        "retry_after": retry_after
                    },
                    headers={"Retry-After": str(retry_after)}
                )

        response = await call_next(request)

        # Most specific limit for transparency
        limiter = matching[-1]
        response.headers["X-RateLimit-Limit"] = str(limiter.max_requests)
        response.headers["X-RateLimit-Window"] = f"{limiter.window_size:g}"
        return response
