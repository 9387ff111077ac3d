"""
Функции безопасности: хеширование паролей, создание и проверка JWT токенов.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

logger = logging.getLogger(__name__)

# Контекст для хеширования паролей (bcrypt, cost 10)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)


def hash_password(password: str) -> str:
    """Хеширует пароль (каждый раз с новой солью)"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Проверяет пароль.

    Несовпадение -> False. Битый хеш -> ValueError от passlib.
    """
    return pwd_context.verify(plain_password, hashed_password)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Выпуск и проверка bearer токенов.

    Args:
        secret_key: Секрет для подписи
        algorithm: Алгоритм подписи
        expires_in: Время жизни токена
        clock: Источник текущего времени (подменяется в тестах)
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expires_in: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expires_in = expires_in
        self._clock = clock

    def issue(self, subject_id: int) -> str:
        """Создаёт JWT токен для пользователя"""
        now = self._clock()
        to_encode = {
            "sub": str(subject_id),
            "iat": now,
            "exp": now + self._expires_in,
        }
        return jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> Optional[int]:
        """
        Проверяет токен и возвращает id пользователя.

        None если подпись не сошлась, токен битый или истёк.
        """
        try:
            # Срок жизни проверяем сами, по своим часам
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_sub": False},
            )
        except JWTError as e:
            logger.debug("Токен не прошёл проверку: %s", e)
            return None

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            return None
        if self._clock().timestamp() >= exp:
            return None

        return _normalize_subject(payload.get("sub"))


def _normalize_subject(sub) -> Optional[int]:
    # sub может прийти числом или строкой
    if isinstance(sub, bool):
        return None
    if isinstance(sub, int):
        return sub
    if isinstance(sub, str):
        try:
            return int(sub)
        except ValueError:
            return None
    return None
