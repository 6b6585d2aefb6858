"""
CRM 层的标准结果结构。

CRM 客户端从不抛异常，所有失败都折叠成 CrmResult(success=False, ...)，
重试策略只看这个对象判断是否可重试。
"""

from dataclasses import dataclass, field
from typing import Any, Optional

NOT_CONFIGURED = "Not configured"


@dataclass
class CrmResult:
    success: bool
    crm_order_id: Optional[str] = None
    error: Optional[str] = None
    status: Optional[int] = None        # HTTP 状态码；传输层失败时为 None
    error_type: Optional[str] = None    # 传输层异常类名（Timeout / ConnectionError ...）
    attempts: int = 0
    data: Any = field(default=None, repr=False)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "crmOrderId": self.crm_order_id,
            "error": self.error,
            "status": self.status,
            "errorType": self.error_type,
            "attempts": self.attempts,
        }
