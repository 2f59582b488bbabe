"""Application errors and their translation into JSON responses.

Services raise the subclasses of :class:`AppError`; the handlers installed by
:func:`register_exception_handlers` turn every failure into a body of the form
``{"error": "<message>"}`` so nothing reaches the client as a bare fault.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message=None, headers=None):
        self.message = message or self.message
        self.headers = headers
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Missing required fields"


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid credentials"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized: please log in first"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Forbidden: token is invalid or expired"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    message = "Username or email already exists"

    def __init__(self, message=None, field=None):
        super().__init__(message)
        self.field = field


class InvalidTokenError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Token is invalid or has expired"


class InternalError(AppError):
    pass


def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    content = {"error": exc.message}
    if isinstance(exc, ConflictError) and exc.field:
        content["field"] = exc.field
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def http_exception_handler(request: Request, exc: HTTPException):
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("Validation error on %s: %s", request.url.path, exc.errors())
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error")


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, InternalError.message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
