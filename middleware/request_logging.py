import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and duration of every API request"""

    # Service endpoints are not logged
    IGNORED_PATHS = {"/docs", "/redoc", "/openapi.json", "/health"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.IGNORED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Response-Time"] = (
                f"{(time.perf_counter() - start_time) * 1000:.2f}ms"
            )
            return response
        finally:
            response_time_ms = (time.perf_counter() - start_time) * 1000
            log = logger.warning if status_code >= 500 else logger.info
            log(
                f"{request.method} {request.url.path} -> {status_code} "
                f"({response_time_ms:.2f}ms)"
            )
