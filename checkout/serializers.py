"""
Response serializers：业务结果 → JSON-able dict。

只负责「输出格式化」，不做任何解析或校验。
成功响应里没有 type 字段（type 只在错误响应里出现，见 exception_handler）。
"""

from .services import Outcome

WEBHOOK_MESSAGES = {
    Outcome.FULFILLED: 'Payment confirmed and order created',
    Outcome.ALREADY_PROCESSED: 'Order already processed',
    Outcome.DECLINED: 'Payment failed - order cancelled',
    Outcome.PENDING: 'Webhook received but status unknown - payment not confirmed',
    Outcome.DEFERRED: 'Payment approved but order not found locally - awaiting confirmation',
}


def serialize_card_payment(order, link):
    return {
        'success': True,
        'orderId': order.order_id,
        'paymentUrl': link.payment_url,
        'transactionId': link.transaction_id,
    }


def serialize_bank_transfer(order, email_sent):
    if email_sent:
        message = 'Order received. Please check your email for SINPE payment instructions.'
    else:
        message = 'Order received. Email could not be sent, please contact us via WhatsApp for payment instructions.'
    return {
        'success': True,
        'orderId': order.order_id,
        'total': order.total,
        'emailSent': email_sent,
        'message': message,
    }


def serialize_confirmation(result):
    """Returns (body, http_status)."""
    if result.outcome == Outcome.PENDING:
        return {
            'success': False,
            'orderId': result.order_id,
            'paymentStatus': 'pending',
            'message': 'Payment outcome not confirmed yet',
        }, 202

    body = {
        'success': True,
        'orderId': result.order_id,
        'message': 'Payment confirmed',
    }
    if result.outcome == Outcome.ALREADY_PROCESSED:
        body['alreadyProcessed'] = True
        body['message'] = 'Order already processed'
    return body, 200


def serialize_webhook_ack(result):
    body = {
        'success': True,
        'orderId': result.order_id,
        'message': WEBHOOK_MESSAGES[result.outcome],
        'webhookId': result.webhook_id,
    }
    if result.outcome == Outcome.ALREADY_PROCESSED:
        body['alreadyProcessed'] = True
    if result.outcome == Outcome.DECLINED:
        body['paymentStatus'] = 'failed'
    if result.outcome in (Outcome.DECLINED, Outcome.PENDING):
        body['code'] = result.code
        body['status'] = result.status
    return body
