import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tutor_api.core.errors import ConflictError
from tutor_api.core.models import User

logger = logging.getLogger(__name__)


class UserStore:
    """Хранилище пользователей и хешей паролей"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def create(self, email: str, password_hash: str, name: str) -> User:
        """
        Создаёт пользователя.

        Уникальность email гарантирует сама БД: если параллельная регистрация
        успела раньше, получаем IntegrityError и отдаём ConflictError.
        """
        user = User(email=email, password=password_hash, name=name)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Email уже зарегистрирован (constraint): %s", email)
            raise ConflictError("User already exists")

        self.db.refresh(user)
        return user
