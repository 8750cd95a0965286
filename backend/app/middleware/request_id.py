"""
Storefront Backend - Request ID Middleware
============================================

What:  Assigns a correlation id to each request and echoes it back.
How:   Reuses the client's X-Request-ID when it is a short token of safe
       characters, otherwise generates a short uuid; stores it in a
       ContextVar (for loggers and exception handlers) and on
       request.state, and sets the X-Request-ID response header.
When:  Outermost middleware, so 429s from the rate limiter carry the id too.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Client ids end up in log lines and error bodies.
_CLIENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def accept_client_id(value: Optional[str]) -> Optional[str]:
    if value and _CLIENT_ID_PATTERN.match(value):
        return value
    return None


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = accept_client_id(request.headers.get("X-Request-ID")) or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
