# app/core/errors.py
# Иерархия ошибок приложения и обработчики FastAPI.
# Любая ошибка превращается в ответ {"error": <message>} с нужным HTTP статусом.

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Базовая ошибка: статус + сообщение для клиента."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid input"


class DuplicatePhone(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Phone already registered"


class DuplicateRequest(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "A registration request is already pending for this phone"


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Missing token"


class InvalidCredential(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Invalid token"


class TokenExpired(InvalidCredential):
    message = "Token expired"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Access denied: admin required"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class InvalidPassword(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Incorrect password"


class AccountDisabled(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Account is disabled"


class AccountPending(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Account is awaiting admin approval"


class StorageFailure(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Server error, please try again later"


class PaymentGatewayError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Payment gateway error"


class PaymentGatewayUnavailable(PaymentGatewayError):
    status_code = status.HTTP_502_BAD_GATEWAY
    message = "Payment gateway unavailable"


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return _error_response(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Берём первую ошибку pydantic: "body.phone: Field required"
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = f"{location}: {first.get('msg', 'invalid value')}"
    else:
        message = ValidationError.message
    return _error_response(status.HTTP_400_BAD_REQUEST, message)


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return _error_response(StorageFailure.status_code, StorageFailure.message)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Глобальный обработчик ошибок."""
    logger.error(f"Unhandled exception: {exc}", exc_info=exc)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
