from .client import CrmClient, build_crm_payload
from .retry import CrmSyncRetrier, RetryPolicy, is_retryable
from .types import NOT_CONFIGURED, CrmResult

__all__ = [
    "NOT_CONFIGURED",
    "CrmClient",
    "CrmResult",
    "CrmSyncRetrier",
    "RetryPolicy",
    "build_crm_payload",
    "is_retryable",
]
