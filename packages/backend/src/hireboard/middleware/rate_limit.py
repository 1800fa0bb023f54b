"""Rate limiting middleware — Redis fixed-window counter per client IP.

Each IP gets a counter key "hireboard:rl:{ip}:{bucket}:{window}" that
expires shortly after its window closes. Login and registration share a
much stricter bucket to slow down credential stuffing.

If Redis isn't initialized (tests, local runs) or errors mid-request,
the request goes through unlimited rather than failing.
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from hireboard.db.redis import get_redis

logger = structlog.get_logger()

AUTH_PATHS = (
    "/api/v1/auth/login",
    "/api/v1/auth/register",
    "/api/v1/auth/forgot-password",
    "/api/v1/auth/reset-password",
)
EXEMPT_PATHS = ("/api/v1/health",)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-IP request budget per window (default: one minute)."""

    def __init__(
        self,
        app,
        default_rpm: int = 100,
        auth_rpm: int = 10,
        window_seconds: int = 60,
    ):
        super().__init__(app)
        self.default_rpm = default_rpm
        self.auth_rpm = auth_rpm
        self.window_seconds = window_seconds

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if path.startswith(EXEMPT_PATHS):
            return await call_next(request)

        try:
            redis = get_redis()
        except RuntimeError:
            return await call_next(request)

        is_auth = path.startswith(AUTH_PATHS)
        limit = self.auth_rpm if is_auth else self.default_rpm
        bucket = "auth" if is_auth else "api"
        client_ip = request.client.host if request.client else "unknown"
        window = int(time.time() // self.window_seconds)
        key = f"hireboard:rl:{client_ip}:{bucket}:{window}"

        try:
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, self.window_seconds * 2)
        except Exception as e:
            logger.warning("rate_limit.redis_error", error=str(e))
            return await call_next(request)

        if count > limit:
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests, please try again later"},
                headers={"Retry-After": str(self.window_seconds)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(max(0, limit - count))
        return response
