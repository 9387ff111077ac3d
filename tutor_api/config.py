"""
Конфигурация бэкенда.

Все настройки читаются из окружения (и .env) один раз при старте
и дальше не меняются: приложение получает готовый объект Settings.
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# Корневая директория проекта
BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"

DEFAULT_SECRET_KEY = "your-secret-key"
PLACEHOLDER_OPENAI_KEY = "sk-your-key-here"

SYSTEM_PROMPT = (
    "You are a helpful tutoring assistant. "
    "Explain concepts clearly and provide examples."
)


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


@dataclass(frozen=True)
class Settings:
    """Неизменяемые настройки процесса"""

    # ============= БАЗОВЫЕ =============
    environment: str = "development"
    log_level: str = "INFO"
    log_dir: Optional[Path] = None

    # ============= БАЗА ДАННЫХ =============
    database_url: str = f"sqlite:///{DATA_DIR / 'app.db'}"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30  # секунд ожидания свободного соединения

    # ============= БЕЗОПАСНОСТЬ =============
    secret_key: str = DEFAULT_SECRET_KEY
    algorithm: str = "HS256"
    access_token_expire_days: int = 7

    # ============= LLM =============
    openai_api_key: str = ""
    openai_base_url: Optional[str] = None
    llm_model_name: str = "gpt-3.5-turbo"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 500
    system_prompt: str = SYSTEM_PROMPT

    # ============= API =============
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    cors_origins: tuple = field(default=("http://localhost:5173",))

    @property
    def access_token_expires(self) -> timedelta:
        return timedelta(days=self.access_token_expire_days)

    @property
    def llm_enabled(self) -> bool:
        """Есть ли настоящий ключ провайдера (иначе работаем на заглушке)"""
        return bool(self.openai_api_key) and self.openai_api_key != PLACEHOLDER_OPENAI_KEY

    @classmethod
    def from_env(cls) -> "Settings":
        """Собирает настройки из переменных окружения"""
        log_dir = os.getenv("LOG_DIR")
        port = os.getenv("API_PORT") or os.getenv("PORT") or "3000"

        return cls(
            environment=os.getenv("ENVIRONMENT", "development"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_dir=Path(log_dir) if log_dir else None,
            database_url=os.getenv("DATABASE_URL") or cls.database_url,
            db_pool_size=_int_env("DB_POOL_SIZE", 5),
            db_max_overflow=_int_env("DB_MAX_OVERFLOW", 10),
            db_pool_timeout=_int_env("DB_POOL_TIMEOUT", 30),
            secret_key=os.getenv("SECRET_KEY") or DEFAULT_SECRET_KEY,
            algorithm=os.getenv("ALGORITHM") or "HS256",
            access_token_expire_days=_int_env("ACCESS_TOKEN_EXPIRE_DAYS", 7),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
            llm_model_name=os.getenv("LLM_MODEL_NAME") or "gpt-3.5-turbo",
            api_host=os.getenv("API_HOST") or "0.0.0.0",
            api_port=int(port),
            cors_origins=(os.getenv("FRONTEND_URL") or "http://localhost:5173",),
        )


@lru_cache
def get_settings() -> Settings:
    """Настройки процесса (читаются один раз)"""
    return Settings.from_env()
