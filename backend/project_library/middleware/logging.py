"""
Project Library Backend - Request Logging Middleware
=====================================================

What:  One access-log line per API call, naming who made it: the session
       user and the owner they acted as (a person or an org), when the
       route authenticated one.
How:   The session dependencies leave `user_id` / `active_owner_id` on
       request.state; this middleware reads them after the handler returns.
       The client address is resolved the same way the rate limiter keys
       clients. Level follows the status class: 5xx → ERROR, 4xx → WARNING,
       everything else → INFO. /health is not logged.

Never logged: request bodies (passwords, message content), cookies and
Authorization headers.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from project_library.middleware.rate_limit import client_key
from project_library.middleware.request_id import request_id_var

logger = logging.getLogger("project_library.access")


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path == "/health":
            return await call_next(request)

        start_time = time.perf_counter()
        client = client_key(request)
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        user_id = getattr(request.state, "user_id", None)
        owner_id = getattr(request.state, "active_owner_id", None)

        logger.log(
            _level_for(status),
            "%s %s %d %.1fms [%s] user=%s as=%s from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            user_id or "-",
            owner_id or "-",
            client,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client,
                "user_id": str(user_id) if user_id else None,
                "active_owner_id": str(owner_id) if owner_id else None,
            },
        )
        return response
