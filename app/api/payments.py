# app/api/payments.py
# Оплата регистрации через PayDunya (токен не требуется).
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.core.errors import NotFound, PaymentGatewayError, ValidationError
from app.db.session import get_db
from app.models.payment import Payment, PaymentStatus
from app.models.user import User
from app.schemas.payment import PaymentCallbackIn, PaymentInitIn, PaymentInitOut
from app.services.paydunya import PAID_STATUSES, PaydunyaClient, get_paydunya_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payment/paydunya")


@router.post("/init", response_model=PaymentInitOut)
def init_payment(
    payload: PaymentInitIn,
    db: Session = Depends(get_db),
    gateway: PaydunyaClient = Depends(get_paydunya_client),
):
    if not payload.amount or payload.amount <= 0 or not payload.description:
        raise ValidationError("Amount or description missing")
    if payload.user_id is not None and db.get(User, payload.user_id) is None:
        raise NotFound("User not found")

    payment = Payment(
        transaction_id=uuid.uuid4().hex,
        user_id=payload.user_id,
        amount=payload.amount,
        description=payload.description,
        status=PaymentStatus.pending.value,
    )
    db.add(payment)
    db.commit()

    try:
        invoice = gateway.create_invoice(
            payload.amount,
            payload.description,
            {"transaction_id": payment.transaction_id, "user_id": payload.user_id},
        )
    except PaymentGatewayError:
        payment.status = "FAILED"
        db.commit()
        raise

    payment.invoice_token = invoice["token"]
    db.commit()
    logger.info(f"💳 Payment initiated: transaction={payment.transaction_id}")
    return {**invoice, "transaction_id": payment.transaction_id}


async def get_callback_token(request: Request, token: Optional[str] = Query(None)) -> Optional[str]:
    """
    Токен из JSON-тела, иначе из query string.
    Тело другого типа (например, form-urlencoded от IPN) не разбираем.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        raw = await request.body()
        if raw.strip():
            try:
                payload = PaymentCallbackIn.model_validate_json(raw)
            except PydanticValidationError:
                raise ValidationError("Invalid callback body")
            if payload.token:
                return payload.token
    return token


@router.post("/callback")
def payment_callback(
    invoice_token: Optional[str] = Depends(get_callback_token),
    db: Session = Depends(get_db),
    gateway: PaydunyaClient = Depends(get_paydunya_client),
):
    """
    Вызывается PayDunya после оплаты. Статус всегда перепроверяется
    у самого шлюза, телу запроса не доверяем.
    """
    if not invoice_token:
        logger.warning("Callback received without token")
        raise ValidationError("Token missing")

    data = gateway.confirm_invoice(invoice_token)
    custom_data = data.get("custom_data") or {}
    transaction_id = custom_data.get("transaction_id")
    if not transaction_id:
        logger.error(f"Callback: no transaction_id in PayDunya response: {data}")
        raise ValidationError("Transaction not found")

    payment = db.query(Payment).filter(Payment.transaction_id == transaction_id).first()
    if payment is None:
        raise NotFound("Transaction not found")

    gateway_status = str(data.get("status") or "").lower()
    if gateway_status in PAID_STATUSES:
        payment.status = PaymentStatus.success.value
        # user_id берём из собственной записи, custom_data шлюза не доверяем
        if payment.user_id is not None:
            user = db.get(User, payment.user_id)
            if user is not None:
                user.has_paid = True
        db.commit()
        logger.info(f"✅ Payment completed: transaction={transaction_id}")
        return {"message": "OK"}

    payment.status = gateway_status or "unknown"
    db.commit()
    logger.info(f"Payment not completed: transaction={transaction_id} status={payment.status}")
    return {"message": "Payment not completed"}
