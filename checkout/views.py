"""
HTTP 入口：只做请求解析和响应格式化，业务全部交给 ReconciliationCoordinator。

错误不在这里处理：异常直接抛出，由 exception_handler.unified_exception_handler 统一格式化。
"""
from django.utils import timezone
from rest_framework.parsers import FormParser, JSONParser
from rest_framework.response import Response
from rest_framework.views import APIView

from .gateway.signature import HASH_HEADER, SECRET_HEADER
from .intake import get_adapter
from .serializers import (
    serialize_bank_transfer,
    serialize_card_payment,
    serialize_confirmation,
    serialize_webhook_ack,
)
from .services import get_coordinator

SOURCE_HEADER = 'X-Order-Source'


def _parse_submission(request):
    adapter = get_adapter(
        request.headers.get(SOURCE_HEADER),
        request.data,
        content_type=request.content_type,
    )
    return adapter.process()


class HealthView(APIView):
    """GET /api/health/"""

    def get(self, request):
        return Response({'status': 'ok', 'message': 'DeepClean API is running'})


class CreatePaymentView(APIView):
    """POST /api/payments/create-payment/ - 建单并返回 Tilopay 支付链接"""

    def post(self, request):
        submission = _parse_submission(request)
        order, link = get_coordinator().create_card_payment(submission)
        return Response(serialize_card_payment(order, link))


class BankTransferOrderView(APIView):
    """POST /api/orders/bank-transfer/ - SINPE 转账下单，立即发邮件"""

    def post(self, request):
        submission = _parse_submission(request)
        order, email_sent = get_coordinator().create_bank_transfer_order(submission)
        return Response(serialize_bank_transfer(order, email_sent))


class ConfirmPaymentView(APIView):
    """POST /api/payments/confirm/ - 用户从支付页跳转回来后确认"""

    def post(self, request):
        data = request.data if hasattr(request.data, 'get') else {}
        result = get_coordinator().confirm_payment(
            order_id=data.get('orderId'),
            transaction_id=data.get('transactionId'),
            code=data.get('code'),
            return_data=data.get('returnData'),
            status=data.get('status'),
        )
        body, status = serialize_confirmation(result)
        return Response(body, status=status)


class WebhookView(APIView):
    """
    GET  /api/payments/webhook/ - 存活检查
    POST /api/payments/webhook/ - Tilopay 异步通知（JSON 或表单）
    """

    parser_classes = [JSONParser, FormParser]

    def get(self, request):
        return Response({
            'status': 'ok',
            'message': 'Tilopay webhook endpoint is active',
            'timestamp': timezone.now().isoformat(),
        })

    def post(self, request):
        # 必须在 request.data 之前读取原始 body，HMAC 是对原始字节计算的
        raw_body = request.body
        result = get_coordinator().handle_webhook(
            request.data,
            raw_body=raw_body,
            provided_secret=request.headers.get(SECRET_HEADER),
            provided_hash=request.headers.get(HASH_HEADER),
        )
        return Response(serialize_webhook_ack(result))
