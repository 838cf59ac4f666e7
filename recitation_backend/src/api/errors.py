"""
API error taxonomy and the FastAPI exception handlers that render it.

Every error response has the shape {"error": ...}. Validation failures carry a
list of issue descriptors; everything else carries a message string.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map directly to an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: Any = None, status_code: Optional[int] = None):
        self.error = message if message is not None else self.message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.error)


class ValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class AuthError(ApiError):
    """Missing credentials (401) or an invalid/expired token (403)."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Not authenticated"


class ConflictError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Conflict"


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Unauthorized"


class InternalError(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"


def _issues(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    # Pydantic error dicts may carry exception objects in "ctx"; keep the serializable part.
    return [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in errors
    ]


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.error})


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={"error": _issues(exc.errors())},
    )


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail
    content = detail if isinstance(detail, dict) and "error" in detail else {"error": detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error: method=%s path=%s", request.method, request.url.path)
    return JSONResponse(status_code=InternalError.status_code, content={"error": InternalError.message})


# PUBLIC_INTERFACE
def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error contract on `app`."""
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
