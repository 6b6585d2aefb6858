from .base import BaseEmailService
from .factory import get_email_service
from .types import EmailResult

__all__ = ["BaseEmailService", "EmailResult", "get_email_service"]
