# app/schemas/user.py
# Pydantic-схемы для регистрации, логина и публичного профиля.
# Поля регистрации необязательны на уровне схемы: обязательность
# проверяет сервис регистрации, чтобы ответ был единым {"error": ...}.
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from app.models.user import RoleEnum


class RegisterIn(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None
    birth_date: Optional[date] = None
    country: Optional[str] = None
    nationality: Optional[str] = None
    role: Optional[str] = None
    secret_key: Optional[str] = None


class LoginIn(BaseModel):
    phone: Optional[str] = None
    password: Optional[str] = None


class UserOut(BaseModel):
    """Публичный профиль: без hashed_password."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    phone: str
    birth_date: Optional[date] = None
    country: Optional[str] = None
    nationality: Optional[str] = None
    role: RoleEnum
    is_active: bool
    approved: bool
    pending_approval: bool
    has_paid: bool
    created_at: Optional[datetime] = None


class RegisterOut(BaseModel):
    message: str
    user: UserOut


class LoginOut(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    user: UserOut


class UserEnvelope(BaseModel):
    user: UserOut


class UserListOut(BaseModel):
    users: List[UserOut]


class RequestListOut(BaseModel):
    requests: List[UserOut]


class MessageOut(BaseModel):
    message: str
