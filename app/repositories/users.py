# app/repositories/users.py
# Хранилище пользователей поверх SQLAlchemy Session.
# Каждая мутация — один commit; ошибки БД превращаются в StorageFailure.
import logging
from typing import Any, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import DuplicatePhone, StorageFailure
from app.models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_phone(self, phone: str) -> Optional[User]:
        """Поиск по телефону без учёта регистра."""
        try:
            return (
                self.db.query(User)
                .filter(func.lower(User.phone) == phone.lower())
                .first()
            )
        except SQLAlchemyError as e:
            logger.error(f"User lookup by phone failed: {e}")
            raise StorageFailure()

    def find_by_id(self, user_id: int) -> Optional[User]:
        try:
            return self.db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error(f"User lookup by id failed: {e}")
            raise StorageFailure()

    def insert(self, **fields: Any) -> User:
        user = User(**fields)
        try:
            self.db.add(user)
            self.db.commit()
        except IntegrityError:
            # Параллельная регистрация того же номера: UNIQUE сработал в БД
            self.db.rollback()
            logger.warning(f"Unique violation on insert for phone {fields.get('phone')}")
            raise DuplicatePhone()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"User insert failed: {e}")
            raise StorageFailure()
        self.db.refresh(user)
        return user

    def update(self, user: User, **fields: Any) -> User:
        for name, value in fields.items():
            setattr(user, name, value)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"User update failed for id={user.id}: {e}")
            raise StorageFailure()
        self.db.refresh(user)
        return user

    def delete(self, user: User) -> None:
        try:
            self.db.delete(user)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"User delete failed for id={user.id}: {e}")
            raise StorageFailure()

    def list_pending(self) -> List[User]:
        try:
            return (
                self.db.query(User)
                .filter(User.pending_approval.is_(True), User.approved.is_(False))
                .order_by(User.created_at, User.id)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Pending users listing failed: {e}")
            raise StorageFailure()

    def list_all(self) -> List[User]:
        try:
            return self.db.query(User).order_by(User.id).all()
        except SQLAlchemyError as e:
            logger.error(f"Users listing failed: {e}")
            raise StorageFailure()
