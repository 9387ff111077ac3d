"""
Настройка подключения к базе данных.
"""

from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.requests import Request

from tutor_api.config import Settings

# Базовый класс для моделей
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite по умолчанию игнорирует ON DELETE CASCADE
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(settings: Settings) -> Engine:
    """
    Создаёт движок БД с общим пулом соединений на весь процесс.

    Для SQLite пул не ограничиваем, для PostgreSQL задаём размер пула
    и таймаут ожидания свободного соединения.
    """
    url = settings.database_url

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}  # Только для SQLite
        if url in ("sqlite://", "sqlite:///:memory:"):
            # Одна общая in-memory база для всех потоков
            kwargs["poolclass"] = StaticPool
        else:
            # Папка под файл базы может ещё не существовать
            database = make_url(url).database
            if database:
                Path(database).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(url, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_pre_ping=True,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    """
    Dependency для получения сессии БД в endpoint'ах.

    Использование:
        @router.get("/sessions")
        def list_sessions(db: Session = Depends(get_db)):
            ...
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
