"""
Custom middleware for the application.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from billboard_api.core.config import settings
from billboard_api.core.logging import get_logger, log_request, LogContext
from billboard_api.core.redis import get_redis

logger = get_logger(__name__)

RATE_LIMIT_EXEMPT_PATHS = ("/health", "/api/v1/health", "/api/v1/health/ready")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware to add a unique request ID to each request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Add request ID to request state and response headers."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        with LogContext(request_id=request_id):
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all requests and responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Log request details and response status."""
        started = time.perf_counter()
        logger.debug("request_started", method=request.method, path=request.url.path)

        try:
            response = await call_next(request)
        except Exception as e:
            log_request(logger, request, 500, started, error=e)
            raise

        log_request(logger, request, response.status_code, started)
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed one-minute window rate limiting per client address, backed by Redis."""

    def __init__(self, app, rate_limit: int = None):
        super().__init__(app)
        self.rate_limit = rate_limit or settings.rate_limit_per_minute

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Check rate limit before processing request."""
        if request.url.path in RATE_LIMIT_EXEMPT_PATHS:
            return await call_next(request)

        client_id = self._get_client_id(request)
        reset_at = str(int(time.time()) + 60)

        current = await self._hit(client_id)
        if current is not None and current > self.rate_limit:
            return JSONResponse(
                status_code=429,
                content={"error": "Rate limit exceeded. Please try again later."},
                headers={
                    "X-RateLimit-Limit": str(self.rate_limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": reset_at,
                },
            )

        response = await call_next(request)

        remaining = self.rate_limit if current is None else max(0, self.rate_limit - current)
        response.headers["X-RateLimit-Limit"] = str(self.rate_limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        response.headers["X-RateLimit-Reset"] = reset_at
        return response

    def _get_client_id(self, request: Request) -> str:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return f"ip:{forwarded.split(',')[0].strip()}"
        if request.client:
            return f"ip:{request.client.host}"
        return "anonymous"

    async def _hit(self, client_id: str):
        """Count this request; returns None when Redis is unavailable."""
        redis_client = get_redis()
        if not redis_client:
            return None

        try:
            key = f"rate_limit:{client_id}"
            current = await redis_client.incr(key)
            if current == 1:
                await redis_client.expire(key, 60)
            return current
        except Exception as e:
            # Requests go through when the limiter itself is down
            logger.error("rate_limit_check_failed", error=str(e))
            return None
