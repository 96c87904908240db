"""Redis-based rate limiting middleware.

Per-client, per-endpoint limits using Redis INCR + EXPIRE.
Falls back to an in-memory dict when Redis is unavailable.
"""
import hashlib
import logging
import time
from collections import defaultdict

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from portfolio_api.middleware.error_handler import error_body
from portfolio_api.utils.helpers import client_ip

logger = logging.getLogger(__name__)

# In-memory fallback when Redis is not available
_memory_store: dict[str, list[float]] = defaultdict(list)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limiting with configurable limits per endpoint prefix.

    Default: 120 requests per minute per client.
    Login: 10 requests per minute (brute-force protection).
    Contact form and chatbot: 20 per minute (they write and send mail).
    """

    # Endpoint prefix -> (limit, window_seconds)
    LIMITS: dict[str, tuple[int, int]] = {
        "/api/auth/login": (10, 60),
        "/api/contact": (20, 60),
        "/api/chatbot/": (20, 60),
        "default": (120, 60),
    }

    EXEMPT_PREFIXES = ("/api/health", "/docs", "/redoc", "/openapi.json", "/Uploads/")

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if path.startswith(self.EXEMPT_PREFIXES):
            return await call_next(request)

        client_id = self._get_client_identifier(request)
        limit, window = self._get_limit(path)

        if not await self._check_limit(client_id, path, limit, window):
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content=error_body("Rate limit exceeded. Please try again later.", "rate_limited"),
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Window"] = f"{window}s"
        return response

    def _get_client_identifier(self, request: Request) -> str:
        auth = request.headers.get("authorization", "")
        if auth.startswith("Bearer "):
            digest = hashlib.sha256(auth[7:].encode()).hexdigest()[:16]
            return f"token:{digest}"
        peer = request.client.host if request.client else None
        return f"ip:{client_ip(request.headers, peer)}"

    def _get_limit(self, path: str) -> tuple[int, int]:
        for pattern, limit in self.LIMITS.items():
            if pattern != "default" and path.startswith(pattern):
                return limit
        return self.LIMITS["default"]

    async def _check_limit(self, client_id: str, path: str, limit: int, window: int) -> bool:
        """Tries Redis first, falls back to in-memory."""
        try:
            from portfolio_api.utils.redis_client import get_redis
            redis = await get_redis()
            return await check_rate_limit_redis(redis, client_id, path, limit, window)
        except Exception:
            logger.debug("Redis unavailable for rate limiting, using in-memory fallback")

        key = f"ratelimit:{client_id}:{path}"
        now = time.time()
        _memory_store[key] = [t for t in _memory_store[key] if t > now - window]
        if len(_memory_store[key]) >= limit:
            return False
        _memory_store[key].append(now)
        return True


async def check_rate_limit_redis(
    redis_client, client_id: str, endpoint: str, limit: int = 120, window: int = 60
) -> bool:
    """Return True if allowed, False if rate limited."""
    key = f"ratelimit:{client_id}:{endpoint}"
    current = await redis_client.incr(key)
    if current == 1:
        await redis_client.expire(key, window)
    return current <= limit
