"""Order Record Builder: CheckoutSubmission + 定价 + orderId → pending Order."""

import secrets

from ..pricing import quote
from .types import Order, PaymentMethod, PaymentStatus

# 8 位十进制：客户要把它写进 SINPE 转账备注里，不能太长
ORDER_ID_LOW = 10_000_000
ORDER_ID_SPAN = 90_000_000


def generate_order_id() -> str:
    return str(ORDER_ID_LOW + secrets.randbelow(ORDER_ID_SPAN))


def build_order(submission, payment_method: str) -> Order:
    if payment_method not in PaymentMethod.CHOICES:
        raise ValueError(f"Unknown payment method: {payment_method!r}")

    pricing = quote(submission.quantity)
    return Order(
        order_id=generate_order_id(),
        name=submission.name,
        phone=submission.phone,
        email=submission.email,
        address=submission.address,
        quantity=pricing.quantity,
        subtotal=pricing.subtotal,
        shipping_cost=pricing.shipping_cost,
        total=pricing.total,
        color=submission.color,
        comment=submission.comment,
        payment_method=payment_method,
        payment_status=PaymentStatus.PENDING,
    )
