"""
Application errors and their HTTP mapping.

Every error response has the shape {"error": "<message>"}.
"""

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from app.core.logging import get_logger

log = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


class AppError(Exception):
    """Base application error carrying its HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(AppError):
    """Bad or missing input."""
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidAmountError(ValidationError):
    """Amount is non-numeric, non-finite or out of range."""


class OverRepaymentError(ValidationError):
    """Repayment larger than what the friend currently owes."""


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class NotificationUnavailableError(AppError):
    """Messaging credentials are not configured."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class NotificationFailedError(AppError):
    """The messaging provider call errored."""
    status_code = status.HTTP_502_BAD_GATEWAY


class PersistenceError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("request_failed", path=request.url.path, error=exc.message)
    return error_response(exc)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return error_response(ValidationError("; ".join(messages) or "Invalid request"))


async def persistence_exception_handler(request: Request, exc: PyMongoError) -> JSONResponse:
    log.error("persistence_error", path=request.url.path, error=str(exc))
    return error_response(PersistenceError(INTERNAL_ERROR_MESSAGE))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled_exception", path=request.url.path, exc_info=exc)
    return error_response(AppError(INTERNAL_ERROR_MESSAGE))
