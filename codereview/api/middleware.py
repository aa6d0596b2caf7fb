"""Request logging middleware."""

import time
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from codereview.core import get_logger

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one structured ``request_completed`` event per request.

    Example:
        app.add_middleware(RequestLoggingMiddleware, add_request_id_header=True)
    """

    def __init__(self, app, add_request_id_header: bool = True, logger=None, skip_paths: Optional[set] = None):
        """Initialize the RequestLoggingMiddleware.

        Args:
            app: The ASGI application
            add_request_id_header: Echo the request id back in ``X-Request-ID``
            logger: Logger to use; defaults to ``codereview.api.requests``
            skip_paths: Paths that are not logged (e.g. health checks)
        """
        super().__init__(app)
        self.add_request_id_header = add_request_id_header
        self.logger = logger or get_logger("api.requests")
        self.skip_paths = skip_paths or set()

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            self.logger.exception(
                "request_failed",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise

        if request.url.path not in self.skip_paths:
            self.logger.info(
                "request_completed",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
        if self.add_request_id_header:
            response.headers[REQUEST_ID_HEADER] = request_id
        return response
