"""
HTTP middleware.

RequestIDMiddleware tags every request with an id (taken from the incoming
``X-Request-ID`` header when present) so log lines from one request can be
correlated. The id is stored on ``request.state.request_id`` and echoed back
in the response header.
"""

import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        return response
