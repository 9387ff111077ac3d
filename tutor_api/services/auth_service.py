import logging
from typing import Tuple

from sqlalchemy.orm import Session

from tutor_api.core.errors import AuthenticationError, ConflictError, ValidationError
from tutor_api.core.security import TokenService, hash_password, verify_password
from tutor_api.schemas import UserResponse
from tutor_api.services.user_store import UserStore

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class AuthService:
    """Регистрация и вход пользователей"""

    def __init__(self, db: Session, token_service: TokenService):
        self.users = UserStore(db)
        self.token_service = token_service

    def register(self, email: str, password: str, name: str) -> UserResponse:
        logger.info("🔄 Попытка регистрации: %s", email)

        if not email or not password or not name:
            raise ValidationError("Missing required fields")

        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        # Быстрая проверка, окончательно решает unique constraint
        if self.users.get_by_email(email) is not None:
            logger.warning("⚠️ Email уже зарегистрирован: %s", email)
            raise ConflictError("User already exists")

        user = self.users.create(email=email, password_hash=hash_password(password), name=name)
        logger.info("Пользователь зарегистрирован: id=%s", user.id)

        return UserResponse.model_validate(user)

    def login(self, email: str, password: str) -> Tuple[str, UserResponse]:
        """Проверяет пароль и выдаёт токен"""
        logger.info("🔄 Попытка входа: %s", email)

        if not email or not password:
            raise ValidationError("Missing email or password")

        user = self.users.get_by_email(email)

        # Одинаковый ответ для неизвестного email и неверного пароля
        if user is None or not verify_password(password, user.password):
            logger.warning("⚠️ Неудачная попытка входа: %s", email)
            raise AuthenticationError("Invalid credentials")

        access_token = self.token_service.issue(user.id)
        logger.info("Пользователь вошёл: id=%s", user.id)

        return access_token, UserResponse.model_validate(user)
