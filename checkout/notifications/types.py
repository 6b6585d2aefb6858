"""
邮件层的标准结果结构。

所有 EmailService 实现的 send_order_email() 都返回这个对象。
业务层（services.py）只看 sent，不知道背后用的是哪家邮件服务。
"""

from dataclasses import dataclass, field


@dataclass
class EmailResult:
    sent: bool                                     # 客户邮件是否发出
    detail: str = ""                               # 失败原因 / 供应商返回的 id
    recipients: list[str] = field(default_factory=list)
