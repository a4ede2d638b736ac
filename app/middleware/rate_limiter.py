"""Rate limiting middleware using Redis sliding window.

Limits admin action endpoints (confirm, cancel, complete, unlock) to
10 req/min per IP. Listing endpoints are not rate-limited.
"""
import time
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from loguru import logger
import redis
from app.config import get_settings

# Paths that require rate limiting (action endpoints)
RATE_LIMITED_PATHS = {
    "/confirm",
    "/cancel",
    "/complete",
    "/confirm-strategy-call",
    "/unlock-account",
}

MAX_REQUESTS = 10
WINDOW_SECONDS = 60


def is_rate_limited_path(path: str) -> bool:
    return any(path.endswith(p) for p in RATE_LIMITED_PATHS)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limits action endpoints using Redis sliding window counter."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not is_rate_limited_path(path):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        key = f"ratelimit:{client_ip}:{path}"

        try:
            r = redis.from_url(get_settings().redis_url)

            now = time.time()
            pipe = r.pipeline()
            # Remove expired entries
            pipe.zremrangebyscore(key, 0, now - WINDOW_SECONDS)
            # Count remaining entries
            pipe.zcard(key)
            # Add current request
            pipe.zadd(key, {str(now): now})
            # Set TTL on the key
            pipe.expire(key, WINDOW_SECONDS)
            request_count = pipe.execute()[1]
        except redis.RedisError as e:
            # If Redis is unavailable, allow the request
            logger.debug(f"Rate limiter Redis unavailable, allowing request: {e}")
            return await call_next(request)

        if request_count >= MAX_REQUESTS:
            logger.warning(
                f"Rate limit exceeded for {client_ip} on {path} "
                f"({request_count}/{MAX_REQUESTS} in {WINDOW_SECONDS}s)"
            )
            return JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "error": "Rate limit exceeded",
                    "code": "RATE_LIMIT_EXCEEDED",
                    "limit": MAX_REQUESTS,
                    "window_seconds": WINDOW_SECONDS,
                    "retry_after": WINDOW_SECONDS,
                },
                headers={"Retry-After": str(WINDOW_SECONDS)},
            )

        return await call_next(request)
