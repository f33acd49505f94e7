# app/services/auth.py
# Логин по телефону и паролю: каждая проверка — ранний выход.
import logging
import re
from typing import Optional, Tuple

from app.core.config import Settings
from app.core.errors import AccountDisabled, AccountPending, InvalidPassword, NotFound, ValidationError
from app.core.security import Identity, create_access_token, verify_password
from app.models.user import User
from app.repositories.users import UserRepository

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_phone(phone: str) -> str:
    """'+226 7000 0001 ' -> '+22670000001'."""
    return _WHITESPACE_RE.sub("", phone.strip())


def login(
    repo: UserRepository,
    settings: Settings,
    phone: Optional[str],
    password: Optional[str],
) -> Tuple[str, User]:
    if not phone or not password:
        raise ValidationError("Phone and password are required")

    normalized = normalize_phone(phone)
    user = repo.find_by_phone(normalized)
    if user is None:
        logger.info(f"Login failed, user not found: {normalized}")
        raise NotFound("User not found")

    # Блокировка проверяется до пароля
    if not user.is_active:
        logger.info(f"Login refused, account disabled: id={user.id}")
        raise AccountDisabled()
    if user.is_pending:
        raise AccountPending()

    if not verify_password(password, user.hashed_password):
        logger.info(f"Login failed, wrong password for: {normalized}")
        raise InvalidPassword()

    role = user.role.value if hasattr(user.role, "value") else str(user.role)
    token = create_access_token(Identity(id=user.id, phone=user.phone, role=role), settings)
    logger.info(f"🔑 Login ok: id={user.id}")
    return token, user


def get_profile(repo: UserRepository, identity: Identity) -> User:
    user = repo.find_by_id(identity.id)
    if user is None:
        raise NotFound("User not found")
    return user
