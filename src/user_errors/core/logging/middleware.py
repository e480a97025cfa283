# src/user_errors/core/logging/middleware.py
"""
Request ID middleware for FastAPI / Starlette.

Reuses the incoming `X-Request-ID` header when it looks like an opaque id, otherwise
generates a UUID4. The id is stored in the request-id contextvar for RequestIdFilter
(so "user_error.translated" lines can be matched to the HTTP call) and echoed back
in the response header.
"""

import re
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from .filters import set_request_id, reset_request_id

REQUEST_ID_HEADER = "X-Request-ID"

# letters, digits and a few separators; no whitespace so ids cannot break log lines
_VALID_REQUEST_ID = re.compile(r"[A-Za-z0-9._:\-]{1,128}")


def resolve_request_id(incoming: str | None) -> str:
    if incoming and _VALID_REQUEST_ID.fullmatch(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = set_request_id(rid)
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid
            return response
        finally:
            reset_request_id(token)
