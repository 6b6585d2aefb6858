"""
网关回调字段别名表。

Tilopay 的跳转回调和 webhook 在不同事件类型里用的字段名不一致
（order / order_id / orderNumber / referencia ...）。
所有别名都登记在 FIELD_ALIASES 里，extract_gateway_fields() 是唯一的读取入口；
新别名只需要在表里加一项。
"""

from dataclasses import dataclass
from typing import Any, Optional

# 按优先级排列：前面的字段有值就不看后面的
FIELD_ALIASES = {
    "order_id": ("order", "order_id", "orderId", "orderNumber", "referencia", "reference"),
    "transaction_id": (
        "tilopay-transaction",
        "tpt",
        "transaction_id",
        "transactionId",
        "transaccion_id",
        "id",
    ),
    "code": ("code", "codigo"),
    "status": ("estado", "status", "state"),
    "return_data": ("returnData", "return_data"),
}


@dataclass(frozen=True)
class GatewayFields:
    order_id: Optional[str]
    transaction_id: Optional[str]
    code: Any
    status: str
    return_data: Optional[str]

    @property
    def dedup_key(self) -> str:
        return dedup_key(self.order_id, self.transaction_id)


def dedup_key(order_id, transaction_id) -> str:
    """orderId + transactionId（没有交易号时为空串）。"""
    return f"{order_id}:{transaction_id or ''}"


def _first_present(payload, aliases):
    for name in aliases:
        value = payload.get(name)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _as_text(value) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip()


def extract_gateway_fields(payload) -> GatewayFields:
    """Read order/transaction/code/status out of any gateway payload variant."""
    values = {field: _first_present(payload, aliases) for field, aliases in FIELD_ALIASES.items()}
    return GatewayFields(
        order_id=_as_text(values["order_id"]),
        transaction_id=_as_text(values["transaction_id"]),
        code=values["code"],
        status=(_as_text(values["status"]) or "").lower(),
        return_data=_as_text(values["return_data"]),
    )
