import logging
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import func
from sqlalchemy.orm import Session

from tutor_api.core.errors import NotFoundError, ValidationError
from tutor_api.core.models import TutoringSession
from tutor_api.schemas import (
    Pagination,
    SessionCreateResponse,
    SessionListResponse,
    SessionResponse,
    UserResponse,
)
from tutor_api.services.llm_service import LLMService

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 100
MAX_OFFSET = 2**63 - 1


def _parse_int(value) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def normalize_limit(value) -> int:
    """Отсутствующий, нечисловой или нулевой limit -> 10, дальше зажимаем в [1, 100]"""
    limit = _parse_int(value) or DEFAULT_LIMIT
    return max(1, min(limit, MAX_LIMIT))


def normalize_offset(value) -> int:
    offset = _parse_int(value) or 0
    # Больше BIGINT драйвер не примет
    return max(0, min(offset, MAX_OFFSET))


class SessionService:
    """Сессии репетитора, видимые только их владельцу"""

    def __init__(self, db: Session, llm: LLMService):
        self.db = db
        self.llm = llm

    async def create(self, user: UserResponse, question: Optional[str]) -> SessionCreateResponse:
        if not question or not question.strip():
            raise ValidationError("Question is required")

        logger.info("Вопрос от пользователя id=%s", user.id)

        # Сначала ответ, потом запись: сессия без ответа не сохраняется
        answer = await self.llm.generate(question)

        session = await run_in_threadpool(self._insert, user.id, question, answer)
        logger.info("Сессия создана: id=%s", session.id)

        return SessionCreateResponse(message="Session created successfully", session=session)

    def _insert(self, user_id: int, question: str, answer: str) -> SessionResponse:
        record = TutoringSession(user_id=user_id, question=question, response=answer)
        self.db.add(record)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(record)
        return SessionResponse.model_validate(record)

    def list(self, user: UserResponse, limit=None, offset=None) -> SessionListResponse:
        limit = normalize_limit(limit)
        offset = normalize_offset(offset)

        query = self.db.query(TutoringSession).filter(TutoringSession.user_id == user.id)
        records = (
            query.order_by(TutoringSession.created_at.desc(), TutoringSession.id.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )
        total = (
            self.db.query(func.count(TutoringSession.id))
            .filter(TutoringSession.user_id == user.id)
            .scalar()
        )

        return SessionListResponse(
            sessions=[SessionResponse.model_validate(r) for r in records],
            pagination=Pagination(
                limit=limit,
                offset=offset,
                total=total,
                has_more=offset + limit < total,
            ),
        )

    def get(self, user: UserResponse, session_id) -> SessionResponse:
        # Чужая и несуществующая сессия неразличимы для клиента
        parsed_id = _parse_int(session_id)
        record = None
        if parsed_id is not None and 0 < parsed_id < 2**63:
            record = (
                self.db.query(TutoringSession)
                .filter(TutoringSession.id == parsed_id, TutoringSession.user_id == user.id)
                .first()
            )

        if record is None:
            raise NotFoundError("Session not found")

        return SessionResponse.model_validate(record)
