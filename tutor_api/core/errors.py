"""
Ошибки приложения и их превращение в HTTP ответы.

Все ошибки отдаются клиенту в одном формате: {"error": "<сообщение>"}.
"""
import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Базовая ошибка приложения"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    # Дубликат уникального ключа отдаём как 400
    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamError(AppError):
    """Ошибка провайдера генерации текста"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ProviderAuthError(UpstreamError):
    """Провайдер отклонил наш ключ"""


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    else:
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return error_response(exc.message, exc.status_code)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return error_response("Route not found", exc.status_code)
    return error_response(str(exc.detail), exc.status_code)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors or any(err.get("type") == "missing" for err in errors):
        return "Missing required fields"

    first = errors[0]
    ctx_error = (first.get("ctx") or {}).get("error")
    if ctx_error:
        return str(ctx_error)
    field_name = ".".join(str(part) for part in first.get("loc", ())[1:])
    return f"{field_name}: {first.get('msg')}" if field_name else str(first.get("msg"))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = _validation_message(exc)
    logger.warning("Невалидный запрос %s %s: %s", request.method, request.url.path, message)
    return error_response(message, status.HTTP_400_BAD_REQUEST)


async def unhandled_exception_handler(request: Request, exc: Exception):
    # Детали только в лог, клиенту общий ответ
    logger.error(
        "Необработанная ошибка %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
    )
    return error_response("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)
