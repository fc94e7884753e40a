"""
Request ID middleware.

Every request gets an id (the caller's ``X-Request-ID`` when it is sane,
otherwise a fresh uuid4). The id is echoed back on the response and bound
into structlog's context so every log line of the request carries it.
"""

import contextvars
import re
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,128}$")

request_id_ctx: contextvars.ContextVar[str] = contextvars.ContextVar(
    "request_id", default=""
)


def get_request_id() -> str:
    """Id of the request being handled, or "" outside a request."""
    return request_id_ctx.get()


def _incoming_request_id(request: Request) -> str:
    candidate = request.headers.get(REQUEST_ID_HEADER, "")
    if _VALID_REQUEST_ID.match(candidate):
        return candidate
    return uuid.uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Assign, propagate and echo a per-request id."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = _incoming_request_id(request)
        request.state.request_id = request_id

        token = request_id_ctx.set(request_id)
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")
            request_id_ctx.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
