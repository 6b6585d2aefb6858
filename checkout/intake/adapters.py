"""
具体 Adapter 实现。

新增表单格式：在此文件添加一个类，然后在 factory.py 注册即可。

已注册格式：
  storefront : StorefrontAdapter  (网站结账表单，西班牙语字段名)
  api        : ApiAdapter         (英文字段名，snake_case / camelCase 都接受)
"""

from .base import BaseIntakeAdapter
from .types import DEFAULT_COLOR, Address, CheckoutSubmission


def _text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


# ── StorefrontAdapter ──────────────────────────────────────────────────────
#
# 网站结账表单提交的格式（JSON）:
# {
#   "nombre":      "María Pérez",
#   "telefono":    "8888-8888",
#   "email":       "maria@example.com",
#   "provincia":   "San José",
#   "canton":      "Escazú",
#   "distrito":    "San Rafael",
#   "direccion":   "200m norte de la iglesia",
#   "cantidad":    "2",                     ← 字符串，也可能是数字
#   "color":       "Negro",                 ← 可选，默认 Blanco
#   "comentarios": "Entregar en la tarde"   ← 可选
# }

class StorefrontAdapter(BaseIntakeAdapter):
    source = "storefront"

    def transform(self) -> CheckoutSubmission:
        raw = self._parsed
        return CheckoutSubmission(
            source=self.source,
            raw_payload=raw,
            name=_text(raw.get("nombre")),
            phone=_text(raw.get("telefono")),
            email=_text(raw.get("email")),
            address=Address(
                province=_text(raw.get("provincia")),
                canton=_text(raw.get("canton")),
                district=_text(raw.get("distrito")),
                line=_text(raw.get("direccion")),
            ),
            quantity=raw.get("cantidad"),
            color=_text(raw.get("color")) or DEFAULT_COLOR,
            comment=_text(raw.get("comentarios")),
        )


# ── ApiAdapter ─────────────────────────────────────────────────────────────
#
# 给其他系统直接调用的英文格式，地址可以平铺也可以嵌套：
# {
#   "name": "...", "phone": "...", "email": "...",
#   "address": {"province": "...", "canton": "...", "district": "...", "line": "..."},
#   "quantity": 3,
#   "color": "Blanco",
#   "comment": "..."
# }

class ApiAdapter(BaseIntakeAdapter):
    source = "api"

    def transform(self) -> CheckoutSubmission:
        raw = self._parsed
        address = raw.get("address")
        if isinstance(address, dict):
            addr = address
            line = addr.get("line") or addr.get("full_address") or addr.get("fullAddress")
        else:
            # 平铺格式：address 本身就是地址行
            addr = raw
            line = address or raw.get("address_line") or raw.get("addressLine")

        return CheckoutSubmission(
            source=self.source,
            raw_payload=raw,
            name=_text(raw.get("name")),
            phone=_text(raw.get("phone")),
            email=_text(raw.get("email")),
            address=Address(
                province=_text(addr.get("province")),
                canton=_text(addr.get("canton") or addr.get("county")),
                district=_text(addr.get("district")),
                line=_text(line),
            ),
            quantity=raw.get("quantity"),
            color=_text(raw.get("color")) or DEFAULT_COLOR,
            comment=_text(raw.get("comment") or raw.get("comments")),
        )
