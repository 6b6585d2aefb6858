"""
Unit tests for RetryPolicy / CrmSyncRetrier.

不需要网络：被包装的调用是一个按脚本返回 CrmResult 的假函数，sleep 被替换成记录器。
"""
import pytest

from checkout.crm import NOT_CONFIGURED, CrmResult, CrmSyncRetrier, RetryPolicy, is_retryable
from tests.conftest import OrderFactory


class ScriptedCall:
    """Returns the scripted results in order, counting calls."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.results.pop(0)


def _policy(sleeps, **kwargs):
    return RetryPolicy(sleep=sleeps.append, **kwargs)


class TestIsRetryable:

    @pytest.mark.parametrize('status', [500, 502, 503, 504])
    def test_server_errors_retry(self, status):
        assert is_retryable(CrmResult(success=False, error='boom', status=status))

    @pytest.mark.parametrize('status', [400, 401, 404, 422])
    def test_client_errors_do_not_retry(self, status):
        assert not is_retryable(CrmResult(success=False, error='bad', status=status))

    def test_not_configured_does_not_retry(self):
        assert not is_retryable(CrmResult(success=False, error=NOT_CONFIGURED))

    @pytest.mark.parametrize('message', [
        'timeout after 10s',
        'Read timed out',
        'connect ECONNREFUSED 127.0.0.1:443',
        'network error: connection refused or unreachable',
        'ETIMEDOUT',
    ])
    def test_transport_failures_retry(self, message):
        assert is_retryable(CrmResult(success=False, error=message))

    def test_unknown_transport_failure_does_not_retry(self):
        assert not is_retryable(CrmResult(success=False, error='Invalid URL'))


class TestRetryPolicy:

    def test_503_twice_then_success(self):
        sleeps = []
        call = ScriptedCall(
            CrmResult(success=False, error='HTTP 503', status=503),
            CrmResult(success=False, error='HTTP 503', status=503),
            CrmResult(success=True, crm_order_id='CRM-9'),
        )

        result = _policy(sleeps, max_attempts=3, base_delay=1.0).run(call)

        assert result.success
        assert result.crm_order_id == 'CRM-9'
        assert call.calls == 3
        assert result.attempts == 3
        assert sleeps == [1.0, 2.0]

    def test_linear_backoff_scales_with_base_delay(self):
        sleeps = []
        call = ScriptedCall(
            CrmResult(success=False, status=500),
            CrmResult(success=False, status=500),
            CrmResult(success=True),
        )
        _policy(sleeps, base_delay=0.25).run(call)
        assert sleeps == [0.25, 0.5]

    def test_400_is_not_retried(self):
        sleeps = []
        call = ScriptedCall(CrmResult(success=False, error='HTTP 400', status=400))

        result = _policy(sleeps).run(call)

        assert not result.success
        assert call.calls == 1
        assert sleeps == []

    def test_not_configured_is_not_retried(self):
        sleeps = []
        call = ScriptedCall(CrmResult(success=False, error=NOT_CONFIGURED))

        result = _policy(sleeps).run(call)

        assert result.error == NOT_CONFIGURED
        assert call.calls == 1
        assert sleeps == []

    def test_exhausted_returns_last_failure_without_raising(self):
        sleeps = []
        call = ScriptedCall(
            CrmResult(success=False, error='HTTP 500', status=500),
            CrmResult(success=False, error='HTTP 502', status=502),
            CrmResult(success=False, error='HTTP 503', status=503),
        )

        result = _policy(sleeps, max_attempts=3).run(call)

        assert not result.success
        assert result.status == 503
        assert result.attempts == 3
        # 最后一次失败之后不再等待
        assert sleeps == [1.0, 2.0]

    def test_from_settings_reads_configuration(self, settings):
        settings.CRM_MAX_RETRIES = 5
        settings.CRM_RETRY_BASE_DELAY = 0.5

        policy = RetryPolicy.from_settings()

        assert policy.max_attempts == 5
        assert policy.base_delay == 0.5


class TestCrmSyncRetrier:

    def test_wraps_client_send_order(self):
        order = OrderFactory()
        sleeps = []

        class FlakyClient:
            calls = 0

            def send_order(self, o):
                assert o is order
                self.calls += 1
                if self.calls == 1:
                    return CrmResult(success=False, error='timeout after 10s')
                return CrmResult(success=True, crm_order_id='CRM-2')

        client = FlakyClient()
        result = CrmSyncRetrier(client, _policy(sleeps)).sync(order)

        assert result.success
        assert client.calls == 2
        assert sleeps == [1.0]
