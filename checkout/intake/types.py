"""
Order dataclass：业务逻辑唯一认识的标准格式。

所有 Adapter 的 transform() 返回 CheckoutSubmission（只有客户填写的字段），
builder.build_order() 再补上定价、orderId 和支付字段，得到 Order。
业务层（services.py）只消费 Order，永远不碰外部原始数据。

to_dict() / from_dict() 是 Order 的线上格式（camelCase），
returnData 编码、CRM 映射和 API 响应都基于它。
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from django.utils import timezone

from ..exceptions import BlockError

DEFAULT_COLOR = 'Blanco'


class PaymentMethod:
    BANK_TRANSFER = 'bank_transfer'   # SINPE Móvil 转账
    CARD = 'card'                     # Tilopay 托管支付页

    CHOICES = (BANK_TRANSFER, CARD)


class PaymentStatus:
    PENDING = 'pending'
    COMPLETED = 'completed'
    FAILED = 'failed'

    TERMINAL = (COMPLETED, FAILED)


@dataclass
class Address:
    province: str
    canton: str
    district: str
    line: str


@dataclass
class CheckoutSubmission:
    """
    结账表单提交的内容（已解析、未定价）。

    raw_payload  保存原始数据，用于排查问题，不参与业务逻辑。
    source       标识数据来源（"storefront" / "api"）。
    """

    name: str
    phone: str
    email: str
    address: Address
    quantity: Any
    color: str = DEFAULT_COLOR
    comment: str = ''
    source: str = ''
    raw_payload: Any = field(default=None, repr=False)


@dataclass
class Order:
    order_id: str
    name: str
    phone: str
    email: str
    address: Address
    quantity: int
    subtotal: int
    shipping_cost: int
    total: int
    payment_method: str
    color: str = DEFAULT_COLOR
    comment: str = ''
    payment_status: str = PaymentStatus.PENDING
    transaction_id: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=timezone.now)

    @property
    def is_terminal(self) -> bool:
        return self.payment_status in PaymentStatus.TERMINAL

    def _ensure_pending(self, target):
        if self.is_terminal:
            raise BlockError(
                message=f"Order {self.order_id} is already {self.payment_status}, cannot move to {target}.",
                code='ORDER_ALREADY_FINALIZED',
                detail={'order_id': self.order_id, 'current_status': self.payment_status},
            )

    def mark_completed(self, transaction_id=None, paid_at=None):
        self._ensure_pending(PaymentStatus.COMPLETED)
        self.payment_status = PaymentStatus.COMPLETED
        if transaction_id:
            self.transaction_id = transaction_id
        self.paid_at = paid_at or timezone.now()

    def mark_failed(self, transaction_id=None):
        self._ensure_pending(PaymentStatus.FAILED)
        self.payment_status = PaymentStatus.FAILED
        if transaction_id:
            self.transaction_id = transaction_id

    def to_dict(self) -> dict:
        return {
            'orderId': self.order_id,
            'name': self.name,
            'phone': self.phone,
            'email': self.email,
            'province': self.address.province,
            'canton': self.address.canton,
            'district': self.address.district,
            'address': self.address.line,
            'quantity': self.quantity,
            'color': self.color,
            'subtotal': self.subtotal,
            'shippingCost': self.shipping_cost,
            'total': self.total,
            'comment': self.comment,
            'paymentMethod': self.payment_method,
            'paymentStatus': self.payment_status,
            'transactionId': self.transaction_id,
            'paidAt': self.paid_at.isoformat() if self.paid_at else None,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Order':
        """Inverse of to_dict(). Missing optional fields fall back to defaults."""
        return cls(
            order_id=str(data['orderId']),
            name=str(data.get('name') or ''),
            phone=str(data.get('phone') or ''),
            email=str(data.get('email') or ''),
            address=Address(
                province=str(data.get('province') or ''),
                canton=str(data.get('canton') or ''),
                district=str(data.get('district') or ''),
                line=str(data.get('address') or ''),
            ),
            quantity=int(data['quantity']),
            subtotal=int(data['subtotal']),
            shipping_cost=int(data.get('shippingCost') or 0),
            total=int(data['total']),
            color=str(data.get('color') or DEFAULT_COLOR),
            comment=str(data.get('comment') or ''),
            payment_method=data.get('paymentMethod') or PaymentMethod.CARD,
            payment_status=data.get('paymentStatus') or PaymentStatus.PENDING,
            transaction_id=data.get('transactionId') or None,
            paid_at=_parse_datetime(data.get('paidAt')),
            created_at=_parse_datetime(data.get('createdAt')) or timezone.now(),
        )


def _parse_datetime(value):
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        return None
