"""
CRM 客户端：把 Order 映射成 CRM 的订单格式并 POST 过去。

环境变量：CRM_API_URL / CRM_API_KEY（任一为空 → 返回 "Not configured"，不重试）
每次请求都有显式超时（CRM_TIMEOUT，默认 10 秒）；超时按可重试的传输层失败处理。
"""

import logging

import requests
from django.conf import settings
from django.utils import timezone

from ..intake.types import Order, PaymentMethod, PaymentStatus
from ..pricing import format_colones
from .types import NOT_CONFIGURED, CrmResult

logger = logging.getLogger(__name__)

PRODUCT_NAME = "DeepClean Cámara WiFi HD 1080p"
COURIER = "Correos de Costa Rica"


def payment_comment(order: Order) -> str:
    transaction_id = order.transaction_id or "PENDING"
    if order.payment_method == PaymentMethod.BANK_TRANSFER:
        return "Pago: SINPE Móvil - Estado: Pendiente de confirmación"
    if order.payment_status == PaymentStatus.COMPLETED:
        return f"Pago: Tarjeta (Tilopay) - Estado: PAGADO - ID Transacción: {transaction_id}"
    if order.payment_status == PaymentStatus.FAILED:
        return f"Pago: Tarjeta (Tilopay) - Estado: RECHAZADO - ID Transacción: {transaction_id}"
    return "Pago: Tarjeta (Tilopay) - Estado: Pendiente"


def build_crm_payload(order: Order) -> dict:
    comment = payment_comment(order)
    if order.comment:
        comment = f"{comment}\n\nComentarios del cliente: {order.comment}"

    paid = order.payment_status == PaymentStatus.COMPLETED
    method = "SINPE" if order.payment_method == PaymentMethod.BANK_TRANSFER else "Tilopay"
    local_now = timezone.localtime(timezone.now())

    return {
        "orderId": order.order_id,
        "customer": {
            "name": order.name,
            "phone": order.phone,
            "email": order.email,
        },
        "product": {
            "name": PRODUCT_NAME,
            "quantity": order.quantity,
            "color": order.color,
            "unitPrice": format_colones(order.subtotal // max(order.quantity, 1)),
        },
        "shipping": {
            "cost": "GRATIS" if not order.shipping_cost else format_colones(order.shipping_cost),
            "courier": COURIER,
            "address": {
                "province": order.address.province,
                "canton": order.address.canton,
                "district": order.address.district,
                "fullAddress": order.address.line,
            },
        },
        "total": format_colones(order.total),
        "payment": {
            "method": method,
            "transactionId": order.transaction_id or "PENDING",
            "status": "PAGADO" if paid else "PENDIENTE",
            "date": local_now.strftime("%d/%m/%Y %H:%M:%S"),
        },
        "source": "DeepClean Website",
        "salesChannel": "Website",
        "seller": "Website",
        "metadata": {
            "comments": comment,
            "createdAt": order.created_at.isoformat() if order.created_at else None,
        },
    }


class CrmClient:

    def __init__(self, api_url=None, api_key=None, timeout=None, session=None):
        self.api_url = api_url if api_url is not None else getattr(settings, "CRM_API_URL", "")
        self.api_key = api_key if api_key is not None else getattr(settings, "CRM_API_KEY", "")
        self.timeout = timeout or getattr(settings, "CRM_TIMEOUT", 10)
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.api_url and self.api_key)

    def send_order(self, order: Order) -> CrmResult:
        if not self.configured:
            logger.warning("[CRM] API credentials not configured, skipping sync for order %s", order.order_id)
            return CrmResult(success=False, error=NOT_CONFIGURED)

        try:
            response = self.session.post(
                self.api_url,
                json=build_crm_payload(order),
                headers={"x-api-key": self.api_key},
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            logger.error("[CRM] Request timed out after %ss for order %s", self.timeout, order.order_id)
            return CrmResult(
                success=False,
                error=f"timeout after {self.timeout}s: {exc}",
                error_type=type(exc).__name__,
            )
        except requests.ConnectionError as exc:
            logger.error("[CRM] Connection failed for order %s: %s", order.order_id, exc)
            return CrmResult(
                success=False,
                error=f"network error: connection refused or unreachable ({exc})",
                error_type=type(exc).__name__,
            )
        except requests.RequestException as exc:
            logger.error("[CRM] Request failed for order %s: %s", order.order_id, exc)
            return CrmResult(success=False, error=str(exc), error_type=type(exc).__name__)

        if not response.ok:
            logger.error("[CRM] Sync failed for order %s: %s %s",
                         order.order_id, response.status_code, response.text[:500])
            return CrmResult(
                success=False,
                error=f"HTTP {response.status_code}: {response.text[:500]}",
                status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not isinstance(data, dict):
            data = {}
        crm_order_id = data.get("crmOrderId") or data.get("id")
        logger.info("[CRM] Order %s synced, crm id=%s", order.order_id, crm_order_id)
        return CrmResult(
            success=True,
            crm_order_id=str(crm_order_id) if crm_order_id else None,
            status=response.status_code,
            data=data,
        )
