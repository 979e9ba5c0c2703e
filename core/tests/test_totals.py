"""
Core — Amount Validation Tests

@file core/tests/test_totals.py
"""

from decimal import Decimal

import pytest

from core.exceptions import BusinessRuleViolation, TotalMismatchError
from core.totals import discounted_total, line_amount, money


class TestMoney:
    def test_rounds_half_up(self):
        assert money('2.345') == Decimal('2.35')

    def test_accepts_floats(self):
        assert money(0.1 + 0.2) == Decimal('0.30')


class TestLineAmount:
    def test_computed_when_not_submitted(self):
        assert line_amount(Decimal('12.50'), 3) == Decimal('37.50')

    def test_submitted_within_tolerance(self):
        assert line_amount(Decimal('12.50'), 3, Decimal('37.51')) == Decimal('37.50')

    def test_submitted_mismatch(self):
        with pytest.raises(TotalMismatchError):
            line_amount(Decimal('12.50'), 3, Decimal('40.00'))


class TestDiscountedTotal:
    def test_no_discount(self):
        assert discounted_total(Decimal('100.00')) == Decimal('100.00')

    def test_discount_applied(self):
        assert discounted_total(Decimal('200.00'), Decimal('12.5')) == Decimal('175.00')

    def test_submitted_total_checked(self):
        with pytest.raises(TotalMismatchError):
            discounted_total(Decimal('200.00'), 10, Decimal('200.00'))

    @pytest.mark.parametrize('discount', [Decimal('-1'), Decimal('100.01')])
    def test_discount_out_of_range(self, discount):
        with pytest.raises(BusinessRuleViolation):
            discounted_total(Decimal('10.00'), discount)

    def test_full_discount(self):
        assert discounted_total(Decimal('10.00'), 100) == Decimal('0.00')
