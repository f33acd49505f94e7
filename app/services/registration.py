# app/services/registration.py
# Машина состояний регистрации:
#   Requested (pending_approval=True, approved=False)
#     -> Active (approved=True, pending_approval=False) через approve
#     -> удалена через reject
# Администратор с верным секретом создаётся сразу в Active.
# is_active — отдельная ось (блокировка), не связанная с одобрением.
import hmac
import logging
import re
from typing import List, Optional

from app.core.config import Settings
from app.core.errors import DuplicatePhone, DuplicateRequest, NotFound, ValidationError
from app.core.security import get_password_hash
from app.models.user import RoleEnum, User
from app.repositories.users import UserRepository
from app.schemas.user import RegisterIn

logger = logging.getLogger(__name__)

PHONE_RE = re.compile(r"\+\d{6,15}", re.ASCII)

REQUIRED_FIELDS = (
    "first_name",
    "last_name",
    "phone",
    "password",
    "birth_date",
    "country",
    "nationality",
)


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_candidate(payload: RegisterIn) -> None:
    missing = [name for name in REQUIRED_FIELDS if _is_blank(getattr(payload, name))]
    if missing:
        raise ValidationError(f"All fields are required (missing: {', '.join(missing)})")
    if not PHONE_RE.fullmatch(payload.phone):
        raise ValidationError("Invalid phone number, expected international format like +22670000000")


def resolve_role(requested_role: Optional[str], secret_key: Optional[str], settings: Settings) -> RoleEnum:
    """
    Роль admin выдаётся только при совпадении секрета с ADMIN_SECRET.
    Без верного секрета роль молча понижается до user, без ошибки:
    клиент не должен узнать, какая проверка не прошла.
    """
    if requested_role not in (None, RoleEnum.admin.value):
        return RoleEnum.user
    if not settings.ADMIN_SECRET or not secret_key:
        return RoleEnum.user
    if hmac.compare_digest(secret_key.encode(), settings.ADMIN_SECRET.encode()):
        return RoleEnum.admin
    return RoleEnum.user


def submit(repo: UserRepository, settings: Settings, payload: RegisterIn) -> User:
    """Создаёт заявку (Requested) или сразу активного администратора."""
    validate_candidate(payload)

    # Обе проверки дубликатов — до любой записи
    existing = repo.find_by_phone(payload.phone)
    if existing is not None:
        if existing.is_pending:
            logger.info(f"Registration refused, request already pending for {payload.phone}")
            raise DuplicateRequest()
        logger.info(f"Registration refused, phone already registered: {payload.phone}")
        raise DuplicatePhone()

    role = resolve_role(payload.role, payload.secret_key, settings)
    is_admin = role == RoleEnum.admin

    user = repo.insert(
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        phone=payload.phone,
        hashed_password=get_password_hash(payload.password),
        birth_date=payload.birth_date,
        country=payload.country.strip(),
        nationality=payload.nationality.strip(),
        role=role,
        is_active=True,
        approved=is_admin,
        pending_approval=not is_admin,
    )
    if is_admin:
        logger.info(f"✅ Admin account created directly: id={user.id}")
    else:
        logger.info(f"📝 Registration request created: id={user.id}")
    return user


def _get_pending(repo: UserRepository, user_id: int) -> User:
    user = repo.find_by_id(user_id)
    if user is None or not user.is_pending:
        raise NotFound("Registration request not found")
    return user


def list_pending(repo: UserRepository) -> List[User]:
    return repo.list_pending()


def approve(repo: UserRepository, user_id: int) -> User:
    """Requested -> Active. Повторный approve даёт NotFound и ничего не создаёт."""
    user = _get_pending(repo, user_id)
    user = repo.update(user, approved=True, pending_approval=False, is_active=True)
    logger.info(f"✅ Registration approved: id={user.id}")
    return user


def reject(repo: UserRepository, user_id: int) -> None:
    """Requested -> удалена. Номер снова свободен для регистрации."""
    user = _get_pending(repo, user_id)
    repo.delete(user)
    logger.info(f"🚫 Registration rejected and removed: id={user_id}")


def set_active(repo: UserRepository, user_id: int, active: bool) -> User:
    """Блокировка/разблокировка не трогает состояние одобрения."""
    user = repo.find_by_id(user_id)
    if user is None:
        raise NotFound("User not found")
    user = repo.update(user, is_active=active)
    logger.info(f"User id={user.id} {'activated' if active else 'deactivated'}")
    return user
