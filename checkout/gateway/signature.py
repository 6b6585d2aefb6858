"""
Webhook 签名校验。

规则：
  - 没配置 secret → 直接通过（只打 warning）。没有 secret 的环境照样能收 webhook。
  - x-tilopay-secret header 与 secret 相同 → 通过
  - 否则 hash-tilopay header = HMAC-SHA256(secret, 原始请求体) 的 hex → 通过
  - 其他情况一律失败；调用方必须以 401 拒绝（fail closed）。

比较全部使用 hmac.compare_digest。
"""

import hashlib
import hmac
import logging

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Tilopay-Secret"
HASH_HEADER = "Hash-Tilopay"


def compute_signature(secret: str, raw_body: bytes) -> str:
    if isinstance(raw_body, str):
        raw_body = raw_body.encode("utf-8")
    return hmac.new(secret.encode("utf-8"), raw_body or b"", hashlib.sha256).hexdigest()


def verify_signature(secret, raw_body, provided_secret=None, provided_hash=None) -> bool:
    if not secret:
        logger.warning("[Webhook] TILOPAY_WEBHOOK_SECRET not configured, skipping signature check")
        return True

    if provided_secret and hmac.compare_digest(
        str(provided_secret).encode("utf-8"), secret.encode("utf-8")
    ):
        return True

    if provided_hash:
        expected = compute_signature(secret, raw_body)
        return hmac.compare_digest(
            str(provided_hash).strip().lower().encode("utf-8"), expected.encode("utf-8")
        )

    return False
