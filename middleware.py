import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from services.metrics import increment_http_requests
from services.observability import set_request_id

logger = logging.getLogger("pay302.http")

REQUEST_ID_HEADER = "X-Request-ID"


def _resolve_request_id(request: Request) -> str:
    for name in (REQUEST_ID_HEADER, "X-Correlation-ID"):
        value = request.headers.get(name)
        if value and value.strip():
            return value.strip()[:128]
    return str(uuid.uuid4())


def _route_label(request: Request) -> str:
    # matched route template, never the raw path
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        req_id = _resolve_request_id(request)
        start = time.perf_counter()

        request.state.request_id = req_id
        set_request_id(req_id)

        response = None
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = req_id
            return response
        finally:
            duration_ms = int((time.perf_counter() - start) * 1000)
            status = getattr(response, "status_code", 500)
            increment_http_requests(_route_label(request), status)

            # no headers or bodies here; they may carry signatures
            logger.info(
                "http_request_end method=%s path=%s status=%s duration_ms=%s",
                request.method,
                request.url.path,
                status,
                duration_ms,
            )
            set_request_id(None)
