"""
Error taxonomy and the FastAPI exception handlers that render it.

Every error body has the shape {"error": "<message>"}.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from listingboard.core.config import get_settings
from listingboard.core.logging_config import get_logger

logger = get_logger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Missing required fields"


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Admins only"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class StorageError(AppError):
    """Any failure of the underlying data access layer."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str = None, detail: str = None):
        super().__init__(message)
        self.detail = detail


def _storage_body(exc: StorageError, settings=None) -> dict:
    settings = settings or get_settings()
    body = {"error": exc.message}
    if settings.is_development and exc.detail:
        body["details"] = exc.detail
    return body


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return ValidationError.default_message
    err = errors[0]
    field = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
    msg = err.get("msg", "Invalid value")
    if err.get("type") == "missing":
        return ValidationError.default_message
    if err.get("type") == "value_error":
        return str(err.get("ctx", {}).get("error", msg))
    return f"{field}: {msg}" if field else msg


def register_exception_handlers(app: FastAPI) -> None:
    """Attach JSON renderers for the error taxonomy."""

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        settings = getattr(request.app.state, "settings", None)
        return JSONResponse(status_code=exc.status_code, content=_storage_body(exc, settings))

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": _first_validation_message(exc)},
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
        settings = getattr(request.app.state, "settings", None)
        wrapped = StorageError(detail=str(exc))
        return JSONResponse(status_code=wrapped.status_code, content=_storage_body(wrapped, settings))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )
