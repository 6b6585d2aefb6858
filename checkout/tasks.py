import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(
    acks_late=True,           # 任务执行完才 ack，防止 worker 崩溃时任务丢失
    reject_on_worker_lost=True,
)
def sync_order_to_crm(order_data: dict):
    """
    在 worker 里同步一张订单到 CRM。

    重试由 RetryPolicy 负责（线性退避 1s → 2s，最多 CRM_MAX_RETRIES 次），
    不用 Celery 自带的 retry：耗尽后只记日志并返回结果，不抛异常。
    """
    from checkout.crm import CrmClient, CrmSyncRetrier, RetryPolicy
    from checkout.intake import Order

    order = Order.from_dict(order_data)
    logger.info("[Celery][sync_order_to_crm] order_id=%s", order.order_id)

    result = CrmSyncRetrier(CrmClient(), RetryPolicy.from_settings()).sync(order)
    if not result.success:
        logger.error("[Celery] order_id=%s CRM sync failed after %d attempt(s): %s",
                     order.order_id, result.attempts, result.error)
    return result.to_dict()
