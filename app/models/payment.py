# app/models/payment.py
# Платёж за регистрацию через PayDunya.
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey
from datetime import datetime
from app.db.base import Base
import enum


class PaymentStatus(str, enum.Enum):
    pending = "PENDING"
    success = "SUCCESS"


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(String, unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    amount = Column(Float, nullable=False)
    description = Column(String, nullable=False)
    invoice_token = Column(String, nullable=True, index=True)
    # PENDING / SUCCESS или статус шлюза как есть (cancelled, failed, ...)
    status = Column(String, nullable=False, default=PaymentStatus.pending.value)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
