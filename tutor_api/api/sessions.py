"""Сессии репетитора: вопрос -> ответ LLM -> запись в БД."""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from tutor_api.core.dependencies import get_current_user, get_session_service
from tutor_api.schemas import (
    SessionCreate,
    SessionCreateResponse,
    SessionListResponse,
    SessionResponse,
    UserResponse,
)
from tutor_api.services.session_service import SessionService

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.post("", response_model=SessionCreateResponse)
async def create_session(
    payload: SessionCreate,
    current_user: UserResponse = Depends(get_current_user),
    service: SessionService = Depends(get_session_service),
):
    """Задать вопрос репетитору"""
    return await service.create(current_user, payload.question)


@router.get("", response_model=SessionListResponse)
def list_sessions(
    limit: Optional[str] = Query(default=None),
    offset: Optional[str] = Query(default=None),
    current_user: UserResponse = Depends(get_current_user),
    service: SessionService = Depends(get_session_service),
):
    """Мои сессии, новые первыми"""
    return service.list(current_user, limit=limit, offset=offset)


@router.get("/{session_id}", response_model=SessionResponse)
def get_session(
    session_id: str,
    current_user: UserResponse = Depends(get_current_user),
    service: SessionService = Depends(get_session_service),
):
    return service.get(current_user, session_id)
