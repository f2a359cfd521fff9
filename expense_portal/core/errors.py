"""Application exception taxonomy and FastAPI exception handlers.

Routers raise the domain exceptions below; handlers registered in
``create_app`` render them as the ``ApiResponse`` envelope used by the JSON
API. ``DataAccessError`` has no handler: read paths
catch it and degrade to demo data, write paths catch it and report failure.
"""

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

logger = logging.getLogger("app.errors")


class AppError(Exception):
    """Base class for errors raised by the expense portal."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Caller input rejected before any store interaction."""


class NotFoundError(AppError):
    """The store was reachable but holds no matching record."""


class DataAccessError(AppError):
    """The data store could not be reached or a procedure call failed."""

    def __init__(self, message: str, procedure: str | None = None):
        super().__init__(message)
        self.procedure = procedure


class AssistantError(AppError):
    """The hosted chat model could not produce a reply."""


def _envelope(error: str, details: str | None = None) -> dict:
    return {"success": False, "data": None, "error": error, "errorDetails": details}


def domain_validation_handler(request: Request, exc: ValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content=_envelope(exc.message)
    )


def domain_not_found_handler(request: Request, exc: NotFoundError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND, content=_envelope(exc.message)
    )


def http_error_handler(request: Request, exc: StarletteHTTPException):  # type: ignore
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        detail = f"No route for {request.method} {request.url.path}"
    else:
        detail = exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope("not_found" if exc.status_code == 404 else "http_error", detail),
        headers=getattr(exc, "headers", None),
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "error": "validation_error",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope("internal_error", "An unexpected error occurred."),
    )
