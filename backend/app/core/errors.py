# app/core/errors.py
"""
Service error taxonomy.
Handlers raise these instead of building responses by hand; the exception
handlers registered in app.main turn each class into its HTTP status.
"""
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response


class ServiceError(Exception):
    """Base class for errors that map onto an HTTP status."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str | None = None):
        super().__init__(detail)
        self.detail = detail


class ValidationError(ServiceError):
    """Bad field, bad credentials, disallowed update key or rejected upload."""
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(ServiceError):
    """Missing, malformed or revoked session token."""
    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(ServiceError):
    """Lookup target does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class StorageError(ServiceError):
    """Unexpected persistence failure."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def service_error_handler(request: Request, exc: ServiceError) -> Response:
    # Only 400 responses may carry detail; everything else is an empty body
    if isinstance(exc, ValidationError) and exc.detail is not None:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})
    return Response(status_code=exc.status_code)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> Response:
    """
    Report schema violations as 400 instead of FastAPI's default 422.

    The first error is echoed as "<field>: <message>" so the caller can tell
    which attribute was rejected.
    """
    errors = exc.errors()
    if not errors:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Invalid request"})
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    message = first.get("msg", "Invalid value")
    detail = f"{'.'.join(loc)}: {message}" if loc else message
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": detail})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
