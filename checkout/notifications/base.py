"""
BaseEmailService：所有邮件供应商实现的抽象基类。

每个新供应商只需：
1. 继承 BaseEmailService
2. 实现 send()
3. 在 factory.py 的 _build_registry() 注册一行

services.py 完全不知道背后用哪家邮件服务。
"""

import logging
from abc import ABC, abstractmethod

from django.conf import settings

from ..exceptions import CollaboratorFailure
from .templates import admin_email, customer_email
from .types import EmailResult

logger = logging.getLogger(__name__)


class BaseEmailService(ABC):

    @abstractmethod
    def send(self, to: str, subject: str, body: str) -> str:
        """
        发送一封邮件，返回供应商的消息 id。

        Raises:
            CollaboratorFailure: 发送失败
        """

    def send_order_email(self, order) -> EmailResult:
        """客户确认邮件 + 运营通知邮件。运营邮件失败不影响 sent。"""
        recipients = []

        subject, body = customer_email(order)
        try:
            message_id = self.send(order.email, subject, body)
        except CollaboratorFailure as exc:
            logger.error("[Email] Customer email failed for order %s: %s", order.order_id, exc.message)
            return EmailResult(sent=False, detail=exc.message)
        recipients.append(order.email)

        notification_email = getattr(settings, "ORDER_NOTIFICATION_EMAIL", "")
        if notification_email:
            subject, body = admin_email(order)
            try:
                self.send(notification_email, subject, body)
                recipients.append(notification_email)
            except CollaboratorFailure as exc:
                logger.error("[Email] Admin email failed for order %s: %s", order.order_id, exc.message)
        else:
            logger.warning("[Email] ORDER_NOTIFICATION_EMAIL not set, admin copy skipped")

        return EmailResult(sent=True, detail=message_id or "", recipients=recipients)
