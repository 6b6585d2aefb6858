"""
CRM 同步的有界重试。

RetryPolicy 与具体传输无关：给它一个返回 CrmResult 的函数，
它负责「最多几次、等多久、哪些失败值得重试」。单测时注入假的 sleep 即可，不需要网络。

退避是线性的：第 n 次失败后等待 n × base_delay，没有抖动。
重试耗尽后返回最后一次的失败结果，不抛异常：CRM 失败永远不能拖垮支付确认的响应。
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable

from django.conf import settings

from .types import NOT_CONFIGURED, CrmResult

logger = logging.getLogger(__name__)

# 传输层错误信息里出现这些词 → 可重试
RETRYABLE_MARKERS = (
    "timeout",
    "timed out",
    "etimedout",
    "econnrefused",
    "connection refused",
    "network",
    "unreachable",
)


def is_retryable(result: CrmResult) -> bool:
    """
    - 未配置 CRM              → 不重试
    - HTTP ≥ 500              → 重试
    - HTTP < 500（4xx 等）    → 不重试
    - 无状态码的传输层失败     → 错误信息匹配 RETRYABLE_MARKERS 才重试
    """
    if result.error == NOT_CONFIGURED:
        return False
    if result.status is not None:
        return result.status >= 500
    message = (result.error or "").lower()
    return any(marker in message for marker in RETRYABLE_MARKERS)


@dataclass
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 1.0
    retryable: Callable[[CrmResult], bool] = is_retryable
    sleep: Callable[[float], None] = time.sleep

    @classmethod
    def from_settings(cls, **overrides) -> "RetryPolicy":
        params = {
            "max_attempts": getattr(settings, "CRM_MAX_RETRIES", 3),
            "base_delay": getattr(settings, "CRM_RETRY_BASE_DELAY", 1.0),
        }
        params.update(overrides)
        return cls(**params)

    def delay_for(self, attempt: int) -> float:
        return attempt * self.base_delay

    def run(self, call: Callable[[], CrmResult], label: str = "") -> CrmResult:
        attempts = max(1, self.max_attempts)
        result = None
        for attempt in range(1, attempts + 1):
            logger.info("[CRM] Attempt %d/%d %s", attempt, attempts, label)
            result = call()
            result.attempts = attempt

            if result.success:
                return result

            if attempt < attempts and self.retryable(result):
                wait = self.delay_for(attempt)
                logger.info("[CRM] Waiting %.1fs before retry %s", wait, label)
                self.sleep(wait)
                continue

            logger.error("[CRM] Failed after %d attempt(s) %s: %s", attempt, label, result.error)
            return result
        return result


class CrmSyncRetrier:
    """CrmClient + RetryPolicy：给一张订单，最多同步 max_attempts 次。"""

    def __init__(self, client, policy=None):
        self.client = client
        self.policy = policy or RetryPolicy.from_settings()

    def sync(self, order) -> CrmResult:
        return self.policy.run(
            lambda: self.client.send_order(order),
            label=f"order={order.order_id}",
        )
