"""Application error taxonomy and the FastAPI handlers that render it.

Services raise the typed errors below; the handlers registered by
:func:`register_exception_handlers` turn them into ``{"success": false, "error": ...}``
responses with the matching status code. Anything else is logged and reported as a
generic 500.
"""

from typing import Any, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from codereview.core.logging import get_logger

logger = get_logger("core.exceptions")


class CodeReviewError(Exception):
    """Base class for errors that map onto an HTTP status code."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, details: Optional[List[Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class BadRequestError(CodeReviewError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class UnauthorizedError(CodeReviewError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class ForbiddenError(CodeReviewError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized to access this resource"


class NotFoundError(CodeReviewError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(CodeReviewError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


def error_body(message: str, details: Optional[List[Any]] = None) -> dict:
    body: dict = {"success": False, "error": message}
    if details:
        body["details"] = details
    return body


async def _codereview_error_handler(request: Request, exc: CodeReviewError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.details))


async def _duplicate_key_handler(request: Request, exc: DuplicateKeyError) -> JSONResponse:
    fields = list((exc.details or {}).get("keyValue", {}).keys())
    message = f"Duplicate value for {', '.join(fields)}" if fields else ConflictError.default_message
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=error_body(message))


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body("Validation failed", details))


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI, *, debug: bool = False) -> None:
    """Install the error handlers on ``app``.

    Args:
        app: The FastAPI application.
        debug: When True, the 500 response carries the exception text.
    """

    async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error", path=request.url.path, method=request.method)
        message = str(exc) if debug else "Internal server error"
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=error_body(message))

    app.add_exception_handler(CodeReviewError, _codereview_error_handler)
    app.add_exception_handler(DuplicateKeyError, _duplicate_key_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
