"""
BaseIntakeAdapter：所有结账表单格式 Adapter 的抽象基类。

每个新格式只需：
1. 继承 BaseIntakeAdapter
2. 实现 parse() 和 transform()
3. 在 factory.py 的 _build_registry() 注册一行

业务代码无需任何改动。
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Any

from ..exceptions import ValidationError
from .types import CheckoutSubmission

# ── 共用校验正则 ────────────────────────────────────────────────────────────
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

REQUIRED_FIELDS = (
    ("name", lambda s: s.name),
    ("phone", lambda s: s.phone),
    ("email", lambda s: s.email),
    ("province", lambda s: s.address.province),
    ("canton", lambda s: s.address.canton),
    ("district", lambda s: s.address.district),
    ("address", lambda s: s.address.line),
    ("quantity", lambda s: s.quantity),
)


def _is_blank(value) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


class BaseIntakeAdapter(ABC):
    """
    三步流水线：parse → transform → validate

    子类必须实现 transform()；parse() 默认按 JSON 解析，已经是 dict 的直接用。
    validate() 提供必填字段和 email 校验，子类可 super() 后追加检查。
    """

    # 子类声明自己对应的 source 标识符（与 factory 注册键一致）
    source: str = ""

    def __init__(self, raw_body, content_type: str = ""):
        self._raw_body = raw_body
        self._content_type = content_type
        self._parsed = None

    def parse(self) -> Any:
        raw = self._raw_body
        if isinstance(raw, (bytes, str)):
            try:
                raw = json.loads(raw)
            except ValueError as exc:
                raise ValidationError(
                    message="Request body is not valid JSON.",
                    code="INVALID_JSON",
                ) from exc
        if not hasattr(raw, "get"):
            raise ValidationError(
                message="Request body must be an object.",
                code="INVALID_JSON",
            )
        self._parsed = raw
        return raw

    @abstractmethod
    def transform(self) -> CheckoutSubmission:
        """
        将 self._parsed 转换为 CheckoutSubmission。
        必须把原始数据存入 CheckoutSubmission.raw_payload。
        """

    def validate(self, submission: CheckoutSubmission) -> None:
        missing = [name for name, getter in REQUIRED_FIELDS if _is_blank(getter(submission))]
        if missing:
            raise ValidationError(
                message="Missing required fields",
                code="MISSING_FIELDS",
                detail={"missing": missing},
            )

        if not EMAIL_RE.match(submission.email):
            raise ValidationError(
                message="Email address is not valid.",
                code="INVALID_EMAIL",
                detail={"field": "email"},
            )

    def process(self) -> CheckoutSubmission:
        """parse → transform → validate，返回校验通过的 CheckoutSubmission。"""
        self.parse()
        submission = self.transform()
        self.validate(submission)
        return submission
