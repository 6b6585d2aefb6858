"""
工厂函数：根据 settings.EMAIL_PROVIDER 返回对应的 EmailService 实例。

新增邮件供应商只需：
  1. 在 services.py 新建 XxxEmailService(BaseEmailService) 类
  2. 在此处 _build_registry() 加一行
  不需要修改 services.py 的业务代码。
"""

from django.conf import settings

from .base import BaseEmailService


def _build_registry() -> dict[str, type[BaseEmailService]]:
    from .services import ConsoleEmailService, ResendEmailService

    return {
        "resend":  ResendEmailService,
        "console": ConsoleEmailService,
    }


def get_email_service() -> BaseEmailService:
    """
    从 settings.EMAIL_PROVIDER 读取供应商（默认 "resend"），返回实例。

    Raises:
        ValueError: EMAIL_PROVIDER 未知
    """
    provider = getattr(settings, "EMAIL_PROVIDER", "resend")
    registry = _build_registry()
    service_cls = registry.get(provider)

    if service_cls is None:
        raise ValueError(
            f"Unknown EMAIL_PROVIDER: {provider!r}. "
            f"Known providers: {list(registry.keys())}"
        )

    return service_cls()
