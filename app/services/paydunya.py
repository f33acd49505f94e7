# app/services/paydunya.py
# Клиент PayDunya checkout-invoice: создание счёта и подтверждение оплаты.
# Читаем/пишем только нужные нам поля протокола.
import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import Depends

from app.core.config import Settings, get_settings
from app.core.errors import PaymentGatewayError, PaymentGatewayUnavailable

logger = logging.getLogger(__name__)

SUCCESS_CODE = "00"
PAID_STATUSES = {"completed", "success", "paid"}


class PaydunyaClient:
    def __init__(self, settings: Settings, transport: Optional[httpx.BaseTransport] = None):
        self._settings = settings
        self._base_url = settings.PAYDUNYA_BASE_URL.rstrip("/")
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        s = self._settings
        return {
            "Content-Type": "application/json",
            "PAYDUNYA-MASTER-KEY": s.PAYDUNYA_MASTER_KEY,
            "PAYDUNYA-PRIVATE-KEY": s.PAYDUNYA_PRIVATE_KEY,
            "PAYDUNYA-PUBLIC-KEY": s.PAYDUNYA_PUBLIC_KEY,
            "PAYDUNYA-TOKEN": s.PAYDUNYA_TOKEN,
            "PAYDUNYA-MODE": s.PAYDUNYA_MODE,
        }

    def _request(self, method: str, path: str, json: Optional[dict] = None) -> Dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            with httpx.Client(timeout=self._settings.PAYDUNYA_TIMEOUT, transport=self._transport) as client:
                response = client.request(method, url, headers=self._headers(), json=json)
        except httpx.HTTPError as e:
            logger.error(f"❌ PayDunya request failed: {method} {path}: {e}")
            raise PaymentGatewayUnavailable()
        try:
            return response.json()
        except ValueError:
            logger.error(f"❌ PayDunya returned non-JSON body (HTTP {response.status_code})")
            raise PaymentGatewayError("Invalid response from payment gateway")

    def create_invoice(self, amount: float, description: str, custom_data: Dict[str, Any]) -> Dict[str, str]:
        """Создаёт счёт. Возвращает {"checkout_url", "token"}."""
        s = self._settings
        body = {
            "invoice": {
                "items": {
                    "item_0": {
                        "name": f"{s.STORE_NAME} registration",
                        "quantity": 1,
                        "unit_price": amount,
                        "total_price": amount,
                        "description": description,
                    }
                },
                "total_amount": amount,
                "description": description,
            },
            "store": {"name": s.STORE_NAME},
            "actions": {
                "cancel_url": s.PAYDUNYA_CANCEL_URL,
                "return_url": s.PAYDUNYA_RETURN_URL,
            },
            "custom_data": custom_data,
        }
        data = self._request("POST", "/v1/checkout-invoice/create", json=body)
        if data.get("response_code") != SUCCESS_CODE:
            logger.error(f"PayDunya refused invoice: {data}")
            raise PaymentGatewayError(data.get("response_text") or "Payment gateway error")
        # При успехе response_text содержит URL страницы оплаты
        return {"checkout_url": data.get("response_text"), "token": data.get("token")}

    def confirm_invoice(self, token: str) -> Dict[str, Any]:
        """Реальный статус счёта: {"status", "custom_data", ...}."""
        data = self._request("GET", f"/v1/checkout-invoice/confirm/{token}")
        if data.get("response_code") != SUCCESS_CODE:
            raise PaymentGatewayError(data.get("response_text") or "Invoice not found")
        return data


def get_paydunya_client(settings: Settings = Depends(get_settings)) -> PaydunyaClient:
    return PaydunyaClient(settings)
