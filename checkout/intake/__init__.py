from .builder import build_order, generate_order_id
from .codec import decode_order_payload, encode_order_payload
from .factory import get_adapter
from .types import Address, CheckoutSubmission, Order, PaymentMethod, PaymentStatus

__all__ = [
    "Address",
    "CheckoutSubmission",
    "Order",
    "PaymentMethod",
    "PaymentStatus",
    "build_order",
    "decode_order_payload",
    "encode_order_payload",
    "generate_order_id",
    "get_adapter",
]
