"""Auth API: регистрация и вход."""
from fastapi import APIRouter, Depends

from tutor_api.core.dependencies import get_auth_service
from tutor_api.schemas import RegisterResponse, Token, UserLogin, UserRegister
from tutor_api.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=RegisterResponse)
def register(user_data: UserRegister, service: AuthService = Depends(get_auth_service)):
    """Регистрация нового пользователя"""
    user = service.register(
        email=user_data.email,
        password=user_data.password,
        name=user_data.name.strip(),
    )
    return RegisterResponse(message="User registered successfully", user=user)


@router.post("/login", response_model=Token)
def login(credentials: UserLogin, service: AuthService = Depends(get_auth_service)):
    """Вход пользователя"""
    access_token, user = service.login(credentials.email, credentials.password)
    return Token(access_token=access_token, user=user)
