"""
业务层：下单 + 支付确认对账。

ReconciliationCoordinator 是订单支付状态的唯一写入者。
付款完成的通知可能从三个渠道、以任意顺序、至少一次地到达：
  - confirm：用户从 Tilopay 跳转回来后前端调用（带 base64 编码的整张订单）
  - webhook：Tilopay 服务器异步回调（可能不带订单数据）
  - 以上两者的重试
不管到达几次，履约副作用（邮件 + CRM）对每个 dedup key 最多执行一次。

状态机：pending → completed / pending → failed，终态不可再变；
INDETERMINATE 的结果保持 pending，等更权威的事件。

View 层只需调用这里的方法；校验 / 解码 / 签名错误在任何状态变更之前抛出，
协作方（邮件 / CRM）的失败只记日志，永远不回滚已经写入的终态。
"""

import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Any, Optional

from django.conf import settings

from .crm import CrmClient, CrmSyncRetrier, RetryPolicy
from .exceptions import AuthError, DecodeError, PaymentDeclined, ValidationError
from .gateway import TilopayGateway, Verdict, classify_outcome, dedup_key, extract_gateway_fields, verify_signature
from .intake import Order, PaymentMethod, PaymentStatus, build_order, decode_order_payload
from .notifications import get_email_service
from .stores import DedupLedger, PendingOrderStore

logger = logging.getLogger(__name__)


class Outcome:
    FULFILLED = 'fulfilled'                  # 本次事件赢得竞争，已转为 completed 并履约
    ALREADY_PROCESSED = 'already_processed'  # 同一 key 之前已处理过
    DECLINED = 'declined'                    # 已记录为 failed
    PENDING = 'pending'                      # INDETERMINATE，不改状态
    DEFERRED = 'deferred'                    # 通过了，但手上没有订单数据，交给 confirm 路径


@dataclass
class ReconciliationResult:
    outcome: str
    order_id: str
    verdict: Verdict
    order: Optional[Order] = None
    webhook_id: Optional[str] = None
    code: Any = None
    status: str = ''


class CrmSyncDispatcher:
    """
    CRM 同步入口。

    CRM_SYNC_ASYNC 打开时交给 Celery（tasks.sync_order_to_crm），
    HTTP 响应不用等重试退避；否则在当前请求里同步重试。
    """

    def __init__(self, retrier=None, run_async=None):
        self.retrier = retrier
        self.run_async = getattr(settings, 'CRM_SYNC_ASYNC', False) if run_async is None else run_async

    def sync(self, order):
        if self.run_async:
            from .tasks import sync_order_to_crm
            sync_order_to_crm.delay(order.to_dict())
            logger.info("[CRM] Sync for order %s queued to Celery", order.order_id)
            return None

        retrier = self.retrier or CrmSyncRetrier(CrmClient(), RetryPolicy.from_settings())
        return retrier.sync(order)


def new_webhook_id() -> str:
    return f"wh_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


class ReconciliationCoordinator:

    def __init__(self, ledger, pending_orders, email_service, crm_sync, gateway=None, webhook_secret=''):
        self.ledger = ledger
        self.pending_orders = pending_orders
        self.email_service = email_service
        self.crm_sync = crm_sync
        self.gateway = gateway
        self.webhook_secret = webhook_secret
        # 保护「检查账本 + 标记 + 状态转换」这一组操作
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls):
        return cls(
            ledger=DedupLedger(),
            pending_orders=PendingOrderStore(),
            email_service=get_email_service(),
            crm_sync=CrmSyncDispatcher(),
            gateway=TilopayGateway(),
            webhook_secret=getattr(settings, 'TILOPAY_WEBHOOK_SECRET', ''),
        )

    # ── 下单 ────────────────────────────────────────────────────────────────

    def create_card_payment(self, submission):
        """
        建单 → 存入 pending store → 向网关申请支付链接。
        Returns (order, payment_link). Raises GatewayError.
        """
        order = build_order(submission, PaymentMethod.CARD)
        self.pending_orders.save(order)
        logger.info("[Checkout] Card order %s created, total=%s", order.order_id, order.total)

        link = self.gateway.create_payment_link(order)
        if link.transaction_id:
            order.transaction_id = link.transaction_id
        return order, link

    def create_bank_transfer_order(self, submission):
        """
        SINPE 转账：不经过网关，立即发邮件（含转账说明），尽力同步 CRM。
        Returns (order, email_sent).
        """
        order = build_order(submission, PaymentMethod.BANK_TRANSFER)
        self.pending_orders.save(order)
        logger.info("[Checkout] Bank-transfer order %s created, total=%s", order.order_id, order.total)

        email_sent = self._send_email(order)
        self._sync_crm(order)
        return order, email_sent

    # ── 对账 ────────────────────────────────────────────────────────────────

    def confirm_payment(self, order_id, transaction_id=None, code=None, return_data=None, status=None):
        """
        跳转回来的确认调用。

        Raises:
            ValidationError: 缺 orderId
            DecodeError:     returnData 缺失 / 无法解码 / 与 orderId 不一致
            PaymentDeclined: 网关拒绝，或这笔付款之前已记录为 failed
        """
        if not order_id:
            raise ValidationError(message='Order ID required', code='MISSING_ORDER_ID')
        order_id = str(order_id).strip()

        decoded = decode_order_payload(return_data)
        if decoded.order_id != order_id:
            raise DecodeError(
                message='Order data does not match the order being confirmed',
                code='ORDER_MISMATCH',
                detail={'orderId': order_id},
            )

        transaction_id = str(transaction_id).strip() if transaction_id else None
        verdict = classify_outcome(code, status)
        logger.info("[Confirm] order=%s transaction=%s code=%s verdict=%s",
                    order_id, transaction_id, code, verdict.value)

        key = dedup_key(order_id, transaction_id)
        order = self.pending_orders.get(order_id) or decoded

        if verdict == Verdict.INDETERMINATE:
            return ReconciliationResult(Outcome.PENDING, order_id, verdict, code=code)

        if verdict == Verdict.DECLINED:
            if self._finalize(key, order, verdict, transaction_id):
                logger.info("[Confirm] Payment declined for order %s, recorded as failed", order_id)
            elif self._settled_status(key, order) == PaymentStatus.COMPLETED:
                # 先到的事件已经确认付款成功，以它为准
                logger.info("[Confirm] Order %s already paid, late decline ignored", order_id)
                return ReconciliationResult(Outcome.ALREADY_PROCESSED, order_id, verdict, order=order, code=code)
            raise PaymentDeclined(
                message='Payment was not approved',
                detail={'orderId': order_id, 'code': code},
            )

        if not self._finalize(key, order, verdict, transaction_id):
            if self._settled_status(key, order) == PaymentStatus.FAILED:
                logger.info("[Confirm] Order %s already recorded as failed", order_id)
                raise PaymentDeclined(
                    message='Payment was already recorded as not approved',
                    detail={'orderId': order_id, 'code': code, 'paymentStatus': PaymentStatus.FAILED},
                )
            logger.info("[Confirm] Order %s already processed", order_id)
            return ReconciliationResult(Outcome.ALREADY_PROCESSED, order_id, verdict, order=order, code=code)

        logger.info("[Confirm] Order %s confirmed as paid", order_id)
        self._fulfill(order)
        return ReconciliationResult(Outcome.FULFILLED, order_id, verdict, order=order, code=code)

    def handle_webhook(self, payload, raw_body=b'', provided_secret=None, provided_hash=None):
        """
        Tilopay 服务器回调。

        除了签名失败（401）和缺 orderId（400），其他情况一律返回可确认的结果：
        网关把非 2xx 当作「请重试」，而未知订单重试也不会变好。
        """
        webhook_id = new_webhook_id()

        if not verify_signature(self.webhook_secret, raw_body, provided_secret, provided_hash):
            logger.warning("[Webhook] Signature verification failed [%s]", webhook_id)
            raise AuthError(message='Invalid webhook signature', detail={'webhookId': webhook_id})

        fields = extract_gateway_fields(payload if hasattr(payload, 'get') else {})
        if not fields.order_id:
            logger.error("[Webhook] No order ID in payload [%s]", webhook_id)
            raise ValidationError(message='No order ID', code='MISSING_ORDER_ID', detail={'webhookId': webhook_id})

        verdict = classify_outcome(fields.code, fields.status)
        logger.info("[Webhook] order=%s transaction=%s code=%s status=%s verdict=%s [%s]",
                    fields.order_id, fields.transaction_id, fields.code, fields.status,
                    verdict.value, webhook_id)

        def result(outcome, order=None):
            return ReconciliationResult(
                outcome, fields.order_id, verdict, order=order,
                webhook_id=webhook_id, code=fields.code, status=fields.status,
            )

        order = self._resolve_webhook_order(fields, webhook_id)
        if self.ledger.has_processed(fields.dedup_key) or (order is not None and order.is_terminal):
            logger.info("[Webhook] Order %s already processed [%s]", fields.order_id, webhook_id)
            return result(Outcome.ALREADY_PROCESSED, order)

        if verdict == Verdict.INDETERMINATE:
            logger.warning("[Webhook] Unknown payment status for order %s, left pending [%s]",
                           fields.order_id, webhook_id)
            return result(Outcome.PENDING, order)

        if verdict == Verdict.DECLINED:
            if not self._finalize(fields.dedup_key, order, verdict, fields.transaction_id):
                return result(Outcome.ALREADY_PROCESSED, order)
            logger.info("[Webhook] Payment failed for order %s [%s]", fields.order_id, webhook_id)
            return result(Outcome.DECLINED, order)

        if order is None:
            # 没有完整的客户数据就不履约，由 confirm 路径负责。不标记账本。
            logger.warning("[Webhook] Order %s approved but not known locally, deferring to confirm [%s]",
                           fields.order_id, webhook_id)
            return result(Outcome.DEFERRED)

        if not self._finalize(fields.dedup_key, order, verdict, fields.transaction_id):
            return result(Outcome.ALREADY_PROCESSED, order)

        logger.info("[Webhook] Order %s marked as paid [%s]", fields.order_id, webhook_id)
        self._fulfill(order)
        return result(Outcome.FULFILLED, order)

    # ── 内部 ────────────────────────────────────────────────────────────────

    def _resolve_webhook_order(self, fields, webhook_id):
        order = self.pending_orders.get(fields.order_id)
        if order is not None or not fields.return_data:
            return order

        try:
            echoed = decode_order_payload(fields.return_data)
        except DecodeError as exc:
            logger.warning("[Webhook] Echoed order data unusable for %s: %s [%s]",
                           fields.order_id, exc.message, webhook_id)
            return None

        if echoed.order_id != fields.order_id:
            logger.warning("[Webhook] Echoed order id %s does not match %s [%s]",
                           echoed.order_id, fields.order_id, webhook_id)
            return None
        return echoed

    def _finalize(self, key, order, verdict, transaction_id) -> bool:
        """
        原子地：检查订单是否已是终态 → 在账本里占位 → 写入终态。
        先标记、后副作用：返回 True 的调用方是唯一有权履约的那一个。
        """
        with self._lock:
            if order is not None:
                stored = self.pending_orders.get(order.order_id)
                if (stored is not None and stored.is_terminal) or order.is_terminal:
                    return False

            status = PaymentStatus.COMPLETED if verdict == Verdict.APPROVED else PaymentStatus.FAILED
            if not self.ledger.claim(key, status):
                return False

            if order is not None:
                if verdict == Verdict.APPROVED:
                    order.mark_completed(transaction_id=transaction_id)
                else:
                    order.mark_failed(transaction_id=transaction_id)
                self.pending_orders.save(order)
            return True

    def _settled_status(self, key, order):
        """_finalize 拒绝之后：这笔付款已经落定的终态（completed / failed），不知道时为 None。"""
        stored = self.pending_orders.get(order.order_id) if order is not None else None
        for candidate in (stored, order):
            if candidate is not None and candidate.is_terminal:
                return candidate.payment_status
        return self.ledger.recorded_status(key)

    def _fulfill(self, order):
        # 邮件和 CRM 互不影响，任何一个失败都不回滚订单状态
        self._send_email(order)
        self._sync_crm(order)

    def _send_email(self, order) -> bool:
        try:
            result = self.email_service.send_order_email(order)
        except Exception:
            logger.exception("[Email] Failed to send emails for order %s", order.order_id)
            return False

        if not result.sent:
            logger.error("[Email] Emails not sent for order %s: %s", order.order_id, result.detail)
        return result.sent

    def _sync_crm(self, order):
        try:
            result = self.crm_sync.sync(order)
        except Exception:
            logger.exception("[CRM] Failed to sync order %s", order.order_id)
            return None

        if result is not None and not result.success:
            logger.error("[CRM] Order %s not synced after %d attempt(s): %s",
                         order.order_id, result.attempts, result.error)
        return result


_coordinator = None
_coordinator_lock = threading.Lock()


def get_coordinator() -> ReconciliationCoordinator:
    """进程内唯一的 coordinator（账本和待支付订单随它共享）。"""
    global _coordinator
    with _coordinator_lock:
        if _coordinator is None:
            _coordinator = ReconciliationCoordinator.from_settings()
        return _coordinator
