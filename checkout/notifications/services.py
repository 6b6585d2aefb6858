"""
具体邮件供应商实现。

新增供应商：在此文件添加一个类，然后在 factory.py 注册即可。

已注册供应商：
  resend  : ResendEmailService   (https://api.resend.com/emails)
  console : ConsoleEmailService  (本地开发，只写日志)
"""

import logging

import requests
from django.conf import settings

from ..exceptions import CollaboratorFailure
from .base import BaseEmailService

logger = logging.getLogger(__name__)


# ── ResendEmailService ─────────────────────────────────────────────────────
#
# 使用 Resend HTTP API。
# 环境变量：RESEND_API_KEY、EMAIL_FROM

class ResendEmailService(BaseEmailService):

    API_URL = "https://api.resend.com/emails"

    def __init__(self, api_key=None, sender=None, timeout=None, session=None):
        self.api_key = api_key if api_key is not None else getattr(settings, "RESEND_API_KEY", "")
        self.sender = sender or getattr(settings, "EMAIL_FROM", "")
        self.timeout = timeout or getattr(settings, "EMAIL_TIMEOUT", 10)
        self.session = session or requests.Session()

    def send(self, to: str, subject: str, body: str) -> str:
        if not self.api_key:
            raise CollaboratorFailure("RESEND_API_KEY is not set", code="EMAIL_NOT_CONFIGURED")

        try:
            response = self.session.post(
                self.API_URL,
                json={"from": self.sender, "to": to, "subject": subject, "text": body},
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise CollaboratorFailure(f"Email request failed: {exc}", code="EMAIL_FAILED") from exc

        if not response.ok:
            raise CollaboratorFailure(
                f"Email provider returned {response.status_code}: {response.text[:300]}",
                code="EMAIL_FAILED",
            )

        try:
            return str(response.json().get("id") or "")
        except ValueError:
            return ""


# ── ConsoleEmailService ────────────────────────────────────────────────────

class ConsoleEmailService(BaseEmailService):

    def send(self, to: str, subject: str, body: str) -> str:
        logger.info("[Email] (console) to=%s subject=%s\n%s", to, subject, body)
        return "console"
