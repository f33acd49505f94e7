# app/models/user.py
# Модель пользователя: phone, hashed_password, role и флаги жизненного цикла.
from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, Enum
from datetime import datetime
from app.db.base import Base
import enum


class RoleEnum(str, enum.Enum):
    user = "user"
    admin = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    # UNIQUE на уровне БД — единственный источник истины для уникальности телефона
    phone = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    birth_date = Column(Date, nullable=True)
    country = Column(String, nullable=True)
    nationality = Column(String, nullable=True)
    role = Column(Enum(RoleEnum), nullable=False, default=RoleEnum.user)

    # Заявка: pending_approval=True, approved=False. Решение принято: наоборот.
    is_active = Column(Boolean, nullable=False, default=True)
    approved = Column(Boolean, nullable=False, default=False)
    pending_approval = Column(Boolean, nullable=False, default=True)
    has_paid = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    @property
    def is_pending(self) -> bool:
        return self.pending_approval and not self.approved
