"""
Error types shared by every layer of fetchr.

The persistence services, the HTTP executor and both backends raise the same
``APIException`` family, so the client-side store catches one base class no
matter where a failure happened. Each subclass fixes its HTTP status and
machine-readable ``error_code``; the FastAPI handlers below render any of
them as ``{"detail", "error_code"}`` and ``exception_from_payload`` turns
that envelope back into an exception on the client side.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Body of every error response."""
    detail: str
    error_code: Optional[str] = None


class APIException(Exception):
    """Base class; subclasses override ``status_code`` and ``error_code``."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: Optional[str] = None
    default_detail = "Internal error"

    def __init__(
        self,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
    ):
        self.detail = detail or self.default_detail
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        super().__init__(self.detail)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(detail=self.detail, error_code=self.error_code)


class ResourceNotFoundError(APIException):
    """A collection, request or environment id does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(f"{resource_type} with id {resource_id} not found")


class BadRequestError(APIException):
    """Unusable input, such as an invalid URL or an unreadable form file."""
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "BAD_REQUEST"


class ValidationError(APIException):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = "VALIDATION_ERROR"
    default_detail = "Validation error"


class NetworkError(APIException):
    """The target host could not be reached."""
    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "NETWORK_ERROR"


class RequestTimeoutError(APIException):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    error_code = "TIMEOUT"
    default_detail = "Request timed out"


class DatabaseError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "DATABASE_ERROR"
    default_detail = "Database error occurred"


class CollectionImportError(APIException):
    """The document is not a Postman v2.1 collection."""
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "IMPORT_ERROR"


class RequestCancelledError(APIException):
    """An in-flight send was cancelled."""
    # nginx's "client closed request"
    status_code = 499
    error_code = "REQUEST_CANCELLED"
    default_detail = "Request was cancelled"


# error_code -> class, for the errors rebuilt from their detail alone
_DETAIL_ERRORS: dict[str, type[APIException]] = {
    cls.error_code: cls
    for cls in (
        BadRequestError,
        ValidationError,
        NetworkError,
        RequestTimeoutError,
        DatabaseError,
        CollectionImportError,
        RequestCancelledError,
    )
}


def exception_from_payload(status_code: int, payload: Any) -> APIException:
    """
    Rebuild an exception from an error response body.

    Known codes map back to their class; anything else (including
    RESOURCE_NOT_FOUND, whose detail is already formatted) becomes a plain
    APIException that keeps the status and code it arrived with.
    """
    detail, error_code = None, None
    if isinstance(payload, dict):
        detail = payload.get("detail")
        error_code = payload.get("error_code")
    detail = str(detail) if detail is not None else "Unknown error"

    exc_class = _DETAIL_ERRORS.get(error_code or "")
    if exc_class is not None:
        return exc_class(detail)
    return APIException(detail, status_code=status_code, error_code=error_code)


async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=exc.to_response().model_dump())


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Flatten pydantic errors into ``loc -> path: message`` pairs."""
    messages = [
        " -> ".join(str(part) for part in error["loc"]) + f": {error['msg']}"
        for error in exc.errors()
    ]
    error = ValidationError("; ".join(messages) or None)
    return JSONResponse(status_code=error.status_code, content=error.to_response().model_dump())


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database failure on %s %s", request.method, request.url.path)
    error = DatabaseError()
    return JSONResponse(status_code=error.status_code, content=error.to_response().model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""
    app.add_exception_handler(APIException, api_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
