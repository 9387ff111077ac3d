"""
FastAPI зависимости: сервисы приложения и проверка bearer токена.

Пользователь возвращается как значение зависимости, request не трогаем.
"""
import logging
from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from tutor_api.core.database import get_db
from tutor_api.core.errors import AuthenticationError, InternalError
from tutor_api.core.security import TokenService
from tutor_api.schemas import UserResponse
from tutor_api.services.auth_service import AuthService
from tutor_api.services.llm_service import LLMService
from tutor_api.services.session_service import SessionService
from tutor_api.services.user_store import UserStore

logger = logging.getLogger(__name__)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_llm_service(request: Request) -> LLMService:
    return request.app.state.llm_service


def get_auth_service(
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(db, token_service)


def get_session_service(
    db: Session = Depends(get_db),
    llm: LLMService = Depends(get_llm_service),
) -> SessionService:
    return SessionService(db, llm)


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Достаёт токен из заголовка вида "Bearer <token>" """
    if not authorization:
        raise AuthenticationError("Missing authorization header")

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        raise AuthenticationError("Invalid authorization header format")

    return parts[1]


def resolve_user(authorization: Optional[str], token_service: TokenService, db: Session) -> UserResponse:
    token = extract_bearer_token(authorization)

    user_id = token_service.verify(token)
    if user_id is None:
        raise AuthenticationError("Invalid or expired token")

    # Валидный токен ещё не значит, что пользователь существует
    user = UserStore(db).get_by_id(user_id)
    if user is None:
        raise AuthenticationError("User not found")

    return UserResponse.model_validate(user)


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    token_service: TokenService = Depends(get_token_service),
    db: Session = Depends(get_db),
) -> UserResponse:
    """
    Dependency для защищённых endpoint'ов.

    Использование:
        @router.get("/sessions")
        def list_sessions(current_user: UserResponse = Depends(get_current_user)):
            ...
    """
    try:
        return resolve_user(authorization, token_service, db)
    except AuthenticationError:
        raise
    except Exception as e:
        logger.error("Ошибка аутентификации: %s", e, exc_info=True)
        raise InternalError("Authentication error") from e


def get_optional_user(
    authorization: Optional[str] = Header(default=None),
    token_service: TokenService = Depends(get_token_service),
    db: Session = Depends(get_db),
) -> Optional[UserResponse]:
    """Как get_current_user, но при любой ошибке просто None"""
    if not authorization:
        return None
    try:
        return resolve_user(authorization, token_service, db)
    except Exception as e:
        logger.debug("Необязательная аутентификация не прошла: %s", e)
        return None
