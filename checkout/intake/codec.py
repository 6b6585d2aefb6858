"""
returnData 编解码。

没有数据库在「创建支付」和「跳转回来确认」之间保存订单，
所以整张订单被编码成 base64(JSON) 交给网关，网关在跳转时原样带回。

解码时 subtotal / total 按 quantity 重新计算：这个字段经过了浏览器，不可信。
"""

import base64
import binascii
import json

from ..exceptions import DecodeError
from ..pricing import quote
from .types import Order, PaymentMethod, PaymentStatus

REQUIRED_ORDER_KEYS = ("orderId", "quantity", "subtotal", "total")


def encode_order_payload(order: Order) -> str:
    body = json.dumps(order.to_dict(), separators=(",", ":"), ensure_ascii=False)
    return base64.b64encode(body.encode("utf-8")).decode("ascii")


def decode_order_payload(encoded) -> Order:
    if not encoded or not isinstance(encoded, str):
        raise DecodeError(
            message="Order information not found in request",
            code="MISSING_ORDER_DATA",
        )

    try:
        padded = encoded.strip() + "=" * (-len(encoded.strip()) % 4)
        data = json.loads(base64.b64decode(padded, validate=False).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise DecodeError(message="Could not decode order information") from exc

    if not isinstance(data, dict):
        raise DecodeError(message="Could not decode order information")

    missing = [key for key in REQUIRED_ORDER_KEYS if data.get(key) in (None, "")]
    if missing:
        raise DecodeError(
            message="Order information is incomplete",
            detail={"missing": missing},
        )

    try:
        order = Order.from_dict(data)
    except (KeyError, TypeError, ValueError) as exc:
        raise DecodeError(message="Could not decode order information") from exc

    pricing = quote(order.quantity)
    order.quantity = pricing.quantity
    order.subtotal = pricing.subtotal
    order.shipping_cost = pricing.shipping_cost
    order.total = pricing.total

    # 支付状态只由 coordinator 写入
    order.payment_method = PaymentMethod.CARD
    order.payment_status = PaymentStatus.PENDING
    order.transaction_id = None
    order.paid_at = None
    return order
