"""
Tilopay 支付网关客户端。

流程：POST {base}/login 换 bearer token → POST {base}/processPayment 创建支付链接。
任何一步失败都抛 GatewayError（502）。本地不重试，用户可以重新提交。

环境变量：TILOPAY_BASE_URL / TILOPAY_USER / TILOPAY_PASSWORD / TILOPAY_API_KEY / APP_URL
"""

import logging
from dataclasses import dataclass
from typing import Optional

import requests
from django.conf import settings

from ..exceptions import GatewayError
from ..intake.codec import encode_order_payload
from ..intake.types import Order

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://app.tilopay.com/api/v1"


@dataclass
class PaymentLink:
    payment_url: str
    transaction_id: Optional[str]


def _split_name(full_name: str):
    parts = full_name.split()
    first = parts[0] if parts else full_name
    last = " ".join(parts[1:]) or full_name
    return first, last


class TilopayGateway:

    def __init__(self, base_url=None, user=None, password=None, api_key=None,
                 app_url=None, currency=None, timeout=None, session=None):
        self.base_url = (base_url or getattr(settings, "TILOPAY_BASE_URL", DEFAULT_BASE_URL)).rstrip("/")
        self.user = user if user is not None else getattr(settings, "TILOPAY_USER", "")
        self.password = password if password is not None else getattr(settings, "TILOPAY_PASSWORD", "")
        self.api_key = api_key if api_key is not None else getattr(settings, "TILOPAY_API_KEY", "")
        self.app_url = (app_url or getattr(settings, "APP_URL", "")).rstrip("/")
        self.currency = currency or getattr(settings, "PAYMENT_CURRENCY", "CRC")
        self.timeout = timeout or getattr(settings, "GATEWAY_TIMEOUT", 15)
        self.session = session or requests.Session()

    def _post(self, path, payload, headers=None):
        url = f"{self.base_url}/{path}"
        try:
            response = self.session.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise GatewayError(
                message=f"Could not reach payment gateway: {exc}",
                code="GATEWAY_UNREACHABLE",
            ) from exc

        if not response.ok:
            logger.error("[Gateway] %s failed: %s %s", path, response.status_code, response.text[:500])
            raise GatewayError(
                message=f"Payment gateway returned {response.status_code}",
                detail={"endpoint": path, "status": response.status_code},
            )

        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError(message="Payment gateway returned a non-JSON response") from exc

    def authenticate(self) -> str:
        if not self.user or not self.password:
            raise GatewayError(
                message="Tilopay credentials not configured",
                code="GATEWAY_NOT_CONFIGURED",
            )

        data = self._post("login", {"apiuser": self.user, "password": self.password})
        token = data.get("access_token")
        if not token:
            raise GatewayError(message="No access token in Tilopay response", code="GATEWAY_AUTH_FAILED")

        logger.info("[Gateway] Token received")
        return token

    def build_payment_payload(self, order: Order) -> dict:
        first_name, last_name = _split_name(order.name)
        province_code = "SJ" if order.address.province == "San José" else "OT"
        return {
            "key": self.api_key,
            "amount": int(round(order.total)),
            "currency": self.currency,
            "description": f"DeepClean x{order.quantity} – Orden #{order.order_id}",
            "redirect": f"{self.app_url}/success.html",
            "notification_url": f"{self.app_url}/api/payments/webhook/",
            "hashVersion": "V2",
            "billToFirstName": first_name,
            "billToLastName": last_name,
            "billToAddress": order.address.line,
            "billToAddress2": f"{order.address.district}, {order.address.canton}",
            "billToCity": order.address.canton,
            "billToState": f"CR-{province_code}",
            "billToZipPostCode": "10101",
            "billToCountry": "CR",
            "billToTelephone": order.phone,
            "billToEmail": order.email,
            "orderNumber": order.order_id,
            "capture": "1",
            "subscription": "0",
            "platform": "DeepClean",
            "returnData": encode_order_payload(order),
        }

    def create_payment_link(self, order: Order) -> PaymentLink:
        if not self.api_key:
            raise GatewayError(
                message="TILOPAY_API_KEY not configured",
                code="GATEWAY_NOT_CONFIGURED",
            )

        token = self.authenticate()
        data = self._post(
            "processPayment",
            self.build_payment_payload(order),
            headers={"Authorization": f"Bearer {token}"},
        )

        payment_url = data.get("urlPaymentForm") or data.get("url") or data.get("payment_url")
        if not payment_url:
            logger.error("[Gateway] No payment URL in response for order %s", order.order_id)
            raise GatewayError(message="No payment URL received from Tilopay", code="GATEWAY_NO_URL")

        transaction_id = data.get("id") or data.get("transaction_id")
        logger.info("[Gateway] Payment link created for order %s", order.order_id)
        return PaymentLink(
            payment_url=payment_url,
            transaction_id=str(transaction_id) if transaction_id else None,
        )
