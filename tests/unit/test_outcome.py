"""
Unit tests for classify_outcome().

覆盖判定顺序的每一步，以及 code 的数字 / 字符串两种表示。
"""
import pytest

from checkout.gateway import Verdict, classify_outcome


class TestApproved:

    @pytest.mark.parametrize('code', ['1', 1, ' 1 '])
    def test_code_one_approves(self, code):
        assert classify_outcome(code, None) == Verdict.APPROVED

    def test_code_one_wins_over_declined_status(self):
        assert classify_outcome('1', 'rechazada') == Verdict.APPROVED

    @pytest.mark.parametrize('status', ['approved', 'Aprobada', 'SUCCESS', 'paid', 'completed'])
    def test_approved_status_without_code(self, status):
        assert classify_outcome(None, status) == Verdict.APPROVED

    def test_empty_code_counts_as_absent(self):
        assert classify_outcome('', 'approved') == Verdict.APPROVED


class TestDeclined:

    def test_code_takes_precedence_over_approved_status(self):
        assert classify_outcome(0, 'aprobada') == Verdict.DECLINED

    @pytest.mark.parametrize('code', ['2', 2, '0', 'abc'])
    def test_any_other_code_declines(self, code):
        assert classify_outcome(code, None) == Verdict.DECLINED

    @pytest.mark.parametrize('status', ['rechazada', 'declined', 'failed', 'canceled', 'cancelled', 'Rejected'])
    def test_declined_status_without_code(self, status):
        assert classify_outcome(None, status) == Verdict.DECLINED


class TestIndeterminate:

    def test_unknown_status(self):
        assert classify_outcome(None, 'unknown_value') == Verdict.INDETERMINATE

    def test_nothing_supplied(self):
        assert classify_outcome() == Verdict.INDETERMINATE
