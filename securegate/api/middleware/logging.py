"""
Access logging middleware.

Logs one event when a request starts and one when it finishes; server
errors are logged at error level and failures that escape the app are
logged with their traceback before being re-raised.
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

# Probes are noisy and carry no information
_QUIET_PATHS = frozenset({"/health"})


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of every request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path in _QUIET_PATHS:
            return await call_next(request)

        log = logger.bind(method=request.method, path=request.url.path)
        start = time.perf_counter()

        log.info(
            "Request started",
            client_ip=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )

        try:
            response = await call_next(request)
        except Exception:
            log.exception(
                "Request failed",
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise

        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        if response.status_code >= 500:
            log.error("Request completed", status_code=response.status_code, duration_ms=duration_ms)
        else:
            log.info("Request completed", status_code=response.status_code, duration_ms=duration_ms)

        return response
