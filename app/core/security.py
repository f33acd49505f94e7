# app/core/security.py
# Функции для хеширования паролей, работы с JWT и зависимости авторизации.
# Зависимости доверяют claims из токена и не ходят в БД: смена роли
# вступает в силу только после перевыпуска токена.
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.core.config import Settings, get_settings
from app.core.errors import Forbidden, InvalidCredential, TokenExpired, Unauthenticated
from app.models.user import RoleEnum

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """Личность из токена: id, телефон, роль."""

    id: int
    phone: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == RoleEnum.admin.value


def get_password_hash(password: str) -> str:
    """Хешируем пароль для хранения в БД."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Проверяем пароль при логине."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    identity: Identity,
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> str:
    """Создаём JWT с claims {id, phone, role}; срок по умолчанию — 7 дней."""
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {
        "sub": str(identity.id),
        "id": identity.id,
        "phone": identity.phone,
        "role": identity.role,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> Identity:
    """Проверяет подпись и срок действия, возвращает Identity."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpired()
    except JWTError:
        raise InvalidCredential()

    try:
        return Identity(id=int(payload["id"]), phone=str(payload["phone"]), role=str(payload["role"]))
    except (KeyError, TypeError, ValueError):
        raise InvalidCredential()


def get_current_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> Identity:
    """Возвращает Identity по Bearer токену или бросает 401/403."""
    if credentials is None:
        if request.headers.get("Authorization"):
            raise Unauthenticated("Malformed Authorization header")
        raise Unauthenticated()
    identity = decode_access_token(credentials.credentials, settings)
    request.state.identity = identity
    return identity


def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    """Строгий вариант: роль в токене должна быть admin."""
    if not identity.is_admin:
        raise Forbidden()
    return identity
