# app/api/auth.py
# Роуты для регистрации, логина (JWT) и профиля текущего пользователя.
from fastapi import APIRouter, Depends, status

from app.api.deps import get_user_repo
from app.core.config import Settings, get_settings
from app.core.security import Identity, get_current_identity
from app.repositories.users import UserRepository
from app.schemas.user import LoginIn, LoginOut, RegisterIn, RegisterOut, UserEnvelope
from app.services import auth as auth_service
from app.services import registration

router = APIRouter()


@router.post("/register", response_model=RegisterOut, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterIn,
    repo: UserRepository = Depends(get_user_repo),
    settings: Settings = Depends(get_settings),
):
    """
    Регистрация: создаёт заявку, ожидающую одобрения администратора.
    С верным secret_key аккаунт администратора создаётся сразу активным.
    """
    user = registration.submit(repo, settings, payload)
    if user.is_pending:
        message = "Registration request submitted, awaiting approval"
    else:
        message = "Account created"
    return {"message": message, "user": user}


@router.post("/login", response_model=LoginOut)
def login(
    payload: LoginIn,
    repo: UserRepository = Depends(get_user_repo),
    settings: Settings = Depends(get_settings),
):
    """Логин: phone + password -> token и профиль."""
    token, user = auth_service.login(repo, settings, payload.phone, payload.password)
    return {"message": "Login successful", "token": token, "user": user}


@router.get("/me", response_model=UserEnvelope)
def me(
    identity: Identity = Depends(get_current_identity),
    repo: UserRepository = Depends(get_user_repo),
):
    return {"user": auth_service.get_profile(repo, identity)}
