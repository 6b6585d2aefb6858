"""
Unit tests for the gateway field-alias table.

同一个概念在不同事件里叫不同的名字，extract_gateway_fields() 统一读取。
"""
import pytest

from checkout.gateway import dedup_key, extract_gateway_fields


class TestExtractGatewayFields:

    @pytest.mark.parametrize('alias', ['order', 'order_id', 'orderId', 'orderNumber', 'referencia', 'reference'])
    def test_order_id_aliases(self, alias):
        assert extract_gateway_fields({alias: '12345678'}).order_id == '12345678'

    @pytest.mark.parametrize('alias', ['tilopay-transaction', 'tpt', 'transaction_id', 'transaccion_id', 'id'])
    def test_transaction_id_aliases(self, alias):
        assert extract_gateway_fields({'order': '1', alias: 'TX-9'}).transaction_id == 'TX-9'

    def test_earlier_alias_wins(self):
        fields = extract_gateway_fields({'order': 'A', 'reference': 'B'})
        assert fields.order_id == 'A'

    def test_blank_value_falls_through_to_next_alias(self):
        fields = extract_gateway_fields({'order': '  ', 'orderNumber': '77'})
        assert fields.order_id == '77'

    def test_status_is_lowercased_from_either_alias(self):
        assert extract_gateway_fields({'estado': 'Aprobada'}).status == 'aprobada'
        assert extract_gateway_fields({'status': 'DECLINED'}).status == 'declined'

    def test_code_keeps_original_type(self):
        assert extract_gateway_fields({'code': 1}).code == 1
        assert extract_gateway_fields({'code': '1'}).code == '1'

    def test_numeric_order_id_becomes_text(self):
        assert extract_gateway_fields({'order': 12345678}).order_id == '12345678'

    def test_missing_everything(self):
        fields = extract_gateway_fields({})
        assert fields.order_id is None
        assert fields.transaction_id is None
        assert fields.code is None
        assert fields.status == ''


class TestDedupKey:

    def test_composite_key(self):
        assert dedup_key('100', 'TX') == '100:TX'

    def test_missing_transaction_is_empty_string(self):
        assert dedup_key('100', None) == '100:'
        assert extract_gateway_fields({'order': '100'}).dedup_key == '100:'
