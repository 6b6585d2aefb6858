"""
阶梯定价。

数量 1–5 查固定价目表；表外的数量（0、负数、6 以上、非数字）一律按 1 件计价。
这是有意的安全回退，不是校验：这里永远不抛异常。
金额单位是科朗（CRC）整数，运费恒为 0。
"""

from dataclasses import dataclass

PRICE_TIERS = {
    1: 15900,
    2: 28900,
    3: 39900,
    4: 49900,
    5: 58900,
}

FALLBACK_QUANTITY = 1
SHIPPING_COST = 0


@dataclass(frozen=True)
class Pricing:
    quantity: int      # 实际计价的数量（表外数量已回退为 1）
    subtotal: int
    shipping_cost: int
    total: int


def coerce_quantity(raw) -> int:
    """把表单里的数量转成 int；转不了返回 0（随后会回退到 1 件）。"""
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    try:
        return int(text)
    except ValueError:
        pass
    # "3.0" / 3.0 这类整数值的小数也算数；3.5 不算
    try:
        number = float(text)
    except ValueError:
        return 0
    return int(number) if number.is_integer() else 0


def resolve_subtotal(quantity) -> int:
    return PRICE_TIERS.get(coerce_quantity(quantity), PRICE_TIERS[FALLBACK_QUANTITY])


def quote(quantity) -> Pricing:
    qty = coerce_quantity(quantity)
    if qty not in PRICE_TIERS:
        qty = FALLBACK_QUANTITY
    subtotal = PRICE_TIERS[qty]
    return Pricing(
        quantity=qty,
        subtotal=subtotal,
        shipping_cost=SHIPPING_COST,
        total=subtotal + SHIPPING_COST,
    )


def format_colones(amount) -> str:
    # es-CR 千分位用点号：₡39.900
    return "₡" + f"{int(amount):,}".replace(",", ".")
