from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from restopos.core.request_context import clear_request_context, set_request_context

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Tag every request with an id and log one line when it completes."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        set_request_context(request_id=request_id)
        started = time.perf_counter()

        response: Response | None = None
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            _log_completion(
                request,
                request_id=request_id,
                status_code=response.status_code if response is not None else 500,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            clear_request_context()


def _log_completion(request: Request, *, request_id: str, status_code: int, duration_ms: float) -> None:
    user = getattr(request.state, "user", None)
    level = logging.ERROR if status_code >= 500 else logging.INFO
    logger.log(
        level,
        "%s %s -> %s",
        request.method,
        request.url.path,
        status_code,
        extra={
            "request_id": request_id,
            "user_id": getattr(user, "id", None),
            "endpoint": request.url.path,
            "method": request.method,
            "status_code": status_code,
            "duration_ms": duration_ms,
        },
    )
