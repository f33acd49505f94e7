# app/schemas/payment.py
from typing import Optional

from pydantic import BaseModel


class PaymentInitIn(BaseModel):
    amount: Optional[float] = None
    description: Optional[str] = None
    user_id: Optional[int] = None


class PaymentInitOut(BaseModel):
    checkout_url: Optional[str] = None
    token: Optional[str] = None
    transaction_id: str


class PaymentCallbackIn(BaseModel):
    token: Optional[str] = None
