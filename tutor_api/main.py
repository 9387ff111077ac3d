"""
Tutoring API - главный файл приложения.
"""
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from tutor_api.api.auth import router as auth_router
from tutor_api.api.sessions import router as sessions_router
from tutor_api.config import DEFAULT_SECRET_KEY, Settings, get_settings
from tutor_api.core.database import Base, create_db_engine, create_session_factory
from tutor_api.core.dependencies import get_optional_user
from tutor_api.core.errors import (
    AppError,
    app_error_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from tutor_api.core.logging_config import setup_logging
from tutor_api.core.security import TokenService
from tutor_api.schemas import UserResponse
from tutor_api.services.llm_service import LLMService

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


# ============= LIFESPAN EVENT =============

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Код ДО yield - выполняется при старте (startup).
    Код ПОСЛЕ yield - выполняется при остановке (shutdown).
    """
    settings: Settings = app.state.settings

    # ===== STARTUP =====
    logger.info("Tutoring API запускается...")

    # Создание таблиц в БД
    Base.metadata.create_all(bind=app.state.engine)
    logger.info("База данных готова: %s", app.state.engine.url.render_as_string(hide_password=True))

    if settings.secret_key == DEFAULT_SECRET_KEY:
        logger.warning("⚠️ SECRET_KEY не задан, используется значение по умолчанию")

    logger.info("Окружение: %s", settings.environment)
    logger.info("API готов к работе!")

    yield  # Приложение работает

    # ===== SHUTDOWN =====
    logger.info("Остановка приложения...")
    app.state.engine.dispose()
    logger.info("Приложение остановлено")


async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


# ============= СОЗДАНИЕ ПРИЛОЖЕНИЯ =============

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Собирает приложение; в тестах передаём свои настройки"""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_dir)

    app = FastAPI(
        title="Tutoring API",
        description="User accounts and AI tutoring sessions",
        version=API_VERSION,
        lifespan=lifespan,
    )

    # Всё, что живёт весь процесс
    app.state.settings = settings
    app.state.engine = create_db_engine(settings)
    app.state.session_factory = create_session_factory(app.state.engine)
    app.state.token_service = TokenService(
        settings.secret_key,
        algorithm=settings.algorithm,
        expires_in=settings.access_token_expires,
    )
    app.state.llm_service = LLMService(settings)

    # ============= MIDDLEWARE =============
    app.middleware("http")(log_requests)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ============= ОШИБКИ =============
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ============= РОУТЫ =============
    app.include_router(auth_router)
    app.include_router(sessions_router)

    @app.get("/", tags=["Health"])
    def root(current_user: Optional[UserResponse] = Depends(get_optional_user)):
        """Информация об API (с пользователем, если передан токен)"""
        info = {
            "name": "Tutoring API",
            "version": API_VERSION,
            "endpoints": {
                "health": "/health",
                "auth": "/auth (register, login)",
                "sessions": "/sessions (tutoring sessions)",
            },
        }
        if current_user is not None:
            info["user"] = current_user.model_dump(mode="json")
        return info

    @app.get("/health", tags=["Health"])
    async def health(request: Request):
        """Проверка что API работает"""
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "services": {
                "llm": "mock" if request.app.state.llm_service.is_mock else "openai",
            },
        }

    return app


app = create_app()
