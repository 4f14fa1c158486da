"""
Error taxonomy and the HTTP boundary mapper.

Every failure the API reports is a ``SmartCvError`` subclass carrying its own
status code. ``register_exception_handlers`` turns them (and framework errors)
into ``{"message": ...}`` JSON bodies.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("errors")

INTERNAL_ERROR_MESSAGE = "Internal server error"


class SmartCvError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__

    @property
    def public_message(self) -> str:
        return self.message


class BadRequest(SmartCvError):
    status_code = status.HTTP_400_BAD_REQUEST


class NoFile(BadRequest):
    def __init__(self, message: str = "No file uploaded"):
        super().__init__(message)


class LoginError(SmartCvError):
    status_code = status.HTTP_401_UNAUTHORIZED


class Unauthorized(SmartCvError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class Forbidden(SmartCvError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class NotFound(SmartCvError):
    status_code = status.HTTP_404_NOT_FOUND


class PipelineError(SmartCvError):
    """A stage of the ingestion pipeline failed.

    The detail is kept for logs; clients only see a generic message.
    """

    @property
    def public_message(self) -> str:
        return INTERNAL_ERROR_MESSAGE


class UnsupportedType(PipelineError):
    pass


class ExtractionFailure(PipelineError):
    pass


class GenerationFailure(PipelineError):
    pass


class StorageFailure(PipelineError):
    pass


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    first = errors[0]
    location = [part for part in first.get("loc", ()) if part != "body"]
    field = str(location[-1]) if location else "request"

    if first.get("type") == "missing":
        return f"{field.replace('_', ' ').capitalize()} is required"

    message = first.get("msg", "Invalid request")
    # pydantic prefixes messages raised from validators
    return message.removeprefix("Value error, ")


async def smartcv_error_handler(request: Request, exc: SmartCvError) -> JSONResponse:
    if isinstance(exc, PipelineError):
        logger.error(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.public_message})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": _validation_message(exc)},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": INTERNAL_ERROR_MESSAGE},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error-to-response mapping on the application."""
    app.add_exception_handler(SmartCvError, smartcv_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
