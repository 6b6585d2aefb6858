"""
Payment-Outcome Classifier。

网关两个回调渠道的表示方式不一致：code 有时是数字有时是字符串，
状态词有西班牙语也有英语。这里是唯一吸收这些差异的地方。

判定顺序：
  1. code == 1（数字或字符串）                      → APPROVED
  2. 状态词属于「通过」同义词，且完全没有 code       → APPROVED
  3. 有 code 但不是 1，或状态词属于「拒绝」同义词     → DECLINED
  4. 其他                                            → INDETERMINATE

INDETERMINATE 不触发履约，也不把订单标记为 failed，等更权威的事件。
"""

from enum import Enum

APPROVED_STATUSES = frozenset({"aprobada", "approved", "success", "paid", "completed"})
DECLINED_STATUSES = frozenset({"rechazada", "declined", "failed", "canceled", "cancelled", "rejected"})


class Verdict(str, Enum):
    APPROVED = "approved"
    DECLINED = "declined"
    INDETERMINATE = "indeterminate"


def _has_code(code) -> bool:
    if code is None:
        return False
    if isinstance(code, str) and not code.strip():
        return False
    return True


def _is_approved_code(code) -> bool:
    if isinstance(code, bool):
        return False
    if isinstance(code, (int, float)):
        return code == 1
    return str(code).strip() == "1"


def classify_outcome(code=None, status=None) -> Verdict:
    status_text = str(status or "").strip().lower()
    code_present = _has_code(code)

    if code_present and _is_approved_code(code):
        return Verdict.APPROVED
    if status_text in APPROVED_STATUSES and not code_present:
        return Verdict.APPROVED
    if code_present or status_text in DECLINED_STATUSES:
        return Verdict.DECLINED
    return Verdict.INDETERMINATE
