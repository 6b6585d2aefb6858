"""
Unit tests for exception classes and unified_exception_handler.

不需要数据库，纯 Python 测试：
1. BaseAppException 默认值
2. 各子类的默认 type / code / http_status
3. 构造时覆盖 code / http_status
4. detail 可选
5. unified_exception_handler 把异常转成正确的 JsonResponse
"""
import json

import pytest
from rest_framework.exceptions import NotFound, ParseError

from checkout.exception_handler import unified_exception_handler
from checkout.exceptions import (
    AuthError,
    BaseAppException,
    BlockError,
    CollaboratorFailure,
    DecodeError,
    GatewayError,
    PaymentDeclined,
    ValidationError,
)


# -------------------------------------------------------------------
# Exception classes
# -------------------------------------------------------------------

class TestBaseAppException:

    def test_defaults(self):
        exc = BaseAppException('something broke')
        assert exc.message == 'something broke'
        assert exc.type == 'error'
        assert exc.code == 'UNKNOWN_ERROR'
        assert exc.http_status == 500
        assert exc.detail is None
        assert str(exc) == 'something broke'

    def test_override_code_and_status(self):
        exc = BaseAppException('bad', code='CUSTOM_CODE', http_status=418)
        assert exc.code == 'CUSTOM_CODE'
        assert exc.http_status == 418

    def test_override_does_not_leak_to_class(self):
        ValidationError('bad', code='MISSING_FIELDS')
        assert ValidationError('other').code == 'VALIDATION_ERROR'


@pytest.mark.parametrize('exc_cls, type_, code, status', [
    (ValidationError, 'validation_error', 'VALIDATION_ERROR', 400),
    (DecodeError, 'decode_error', 'INVALID_ORDER_DATA', 400),
    (PaymentDeclined, 'declined', 'PAYMENT_DECLINED', 400),
    (AuthError, 'auth_error', 'INVALID_SIGNATURE', 401),
    (BlockError, 'block', 'BUSINESS_BLOCK', 409),
    (GatewayError, 'gateway_error', 'GATEWAY_ERROR', 502),
    (CollaboratorFailure, 'collaborator_error', 'COLLABORATOR_FAILURE', 502),
])
def test_subclass_defaults(exc_cls, type_, code, status):
    exc = exc_cls('msg')
    assert isinstance(exc, BaseAppException)
    assert (exc.type, exc.code, exc.http_status) == (type_, code, status)


# -------------------------------------------------------------------
# unified_exception_handler
# -------------------------------------------------------------------

class TestUnifiedExceptionHandler:

    def _handle(self, exc):
        return unified_exception_handler(exc, {})

    def test_declined_returns_400(self):
        response = self._handle(PaymentDeclined('Payment was not approved',
                                                detail={'orderId': '12345678', 'code': '2'}))

        assert response.status_code == 400
        body = json.loads(response.content)
        assert body == {
            'type': 'declined',
            'code': 'PAYMENT_DECLINED',
            'message': 'Payment was not approved',
            'detail': {'orderId': '12345678', 'code': '2'},
        }

    def test_auth_error_returns_401(self):
        response = self._handle(AuthError('Invalid webhook signature'))
        assert response.status_code == 401
        assert json.loads(response.content)['type'] == 'auth_error'

    def test_no_detail_field_when_none(self):
        body = json.loads(self._handle(BlockError('blocked')).content)
        assert 'detail' not in body

    def test_gateway_error_is_logged(self, caplog):
        with caplog.at_level('ERROR', logger='checkout.exception_handler'):
            response = self._handle(GatewayError('down', code='GATEWAY_UNREACHABLE'))

        assert response.status_code == 502
        assert 'GATEWAY_UNREACHABLE' in caplog.text

    def test_drf_parse_error_becomes_validation_error(self):
        response = self._handle(ParseError('JSON parse error'))

        assert response.status_code == 400
        body = json.loads(response.content)
        assert body['type'] == 'validation_error'
        assert body['code'] == 'VALIDATION_ERROR'

    def test_other_drf_exceptions_use_default_handler(self):
        response = self._handle(NotFound())
        assert response.status_code == 404

    def test_unknown_exception_not_handled(self):
        assert self._handle(RuntimeError('unexpected')) is None
