"""
Request correlation middleware.

Every request gets an id (taken from X-Request-ID or generated) that is echoed
back on the response and attached to every log record emitted while the
request is handled. The user id context is cleared per request and filled in
by the session dependencies once the cookie is resolved.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from socialhub.logging_config import get_logger, request_id_var, user_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SLOW_REQUEST_MS = 1000


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Scope the logging context to one request and report slow or failing ones."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        request_token = request_id_var.set(request_id)
        user_token = user_id_var.set(None)
        try:
            start = time.perf_counter()
            response = await call_next(request)
            duration_ms = round((time.perf_counter() - start) * 1000, 1)
            response.headers[REQUEST_ID_HEADER] = request_id

            details = {
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            }
            if duration_ms > SLOW_REQUEST_MS:
                logger.warning("Slow request", extra=details)
            elif response.status_code >= 500:
                logger.error("Request failed", extra=details)
            else:
                logger.debug("Request handled", extra=details)
            return response
        finally:
            user_id_var.reset(user_token)
            request_id_var.reset(request_token)
