"""
Project Library Backend - Request ID Middleware
================================================

What:  Tags each request with a correlation ID. The ID is echoed in the
       X-Request-ID header and in `error.request_id` of every error envelope,
       so a client reporting a failed follow or message send can hand support
       one string that matches the access log line.
How:   A client-supplied X-Request-ID is kept when it is short and made of
       safe characters; anything else is replaced by the first 8 characters
       of a UUID4. The ID lives in a ContextVar so exception handlers and
       loggers read it without it being passed around.
When:  Outermost middleware, so 429s from the rate limiter carry it too.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# IDs end up in log lines and JSON bodies; no spaces or control characters
_CLIENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def new_request_id(client_value: str = "") -> str:
    """Return the client's ID when acceptable, otherwise a fresh one."""
    if client_value and _CLIENT_ID_PATTERN.match(client_value):
        return client_value
    return str(uuid.uuid4())[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = new_request_id(request.headers.get("X-Request-ID", ""))

        # Not reset afterwards: the outer 500 handler still reads it
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers["X-Request-ID"] = rid
        return response
