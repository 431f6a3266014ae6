# backend/rentdesk/middleware/structured_logging.py
from __future__ import annotations

import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..config import settings

log = logging.getLogger("rentdesk.request")


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """
    One access line per request, emitted through the JSON formatter:
    method, path, status_code, latency_ms and the caller hint.

    The caller hint is the raw dev user header; bearer tokens are only decoded
    by the auth dependency.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            log.log(
                logging.WARNING if status_code >= 500 else logging.INFO,
                "%s %s -> %s",
                request.method,
                request.url.path,
                status_code,
                extra={
                    "status": status_code,
                    "user_id": request.headers.get(settings.dev_header_user_id),
                    "latency_ms": int((time.perf_counter() - started) * 1000),
                },
            )
