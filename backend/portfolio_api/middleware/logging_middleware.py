"""Request/response logging middleware."""
import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from portfolio_api.utils.helpers import client_ip

logger = structlog.get_logger()

QUIET_PREFIXES = ("/api/health", "/Uploads/")


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)

        path = request.url.path
        log = logger.debug if path.startswith(QUIET_PREFIXES) else logger.info
        if response.status_code >= 500:
            log = logger.error
        log(
            "request",
            method=request.method,
            path=path,
            status=response.status_code,
            duration_ms=elapsed_ms,
            client=client_ip(request.headers, request.client.host if request.client else None),
        )
        return response
