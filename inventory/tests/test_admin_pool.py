"""
Inventory — Admin Stock Pool Tests

@file inventory/tests/test_admin_pool.py
"""

import pytest

from core.exceptions import BusinessRuleViolation
from inventory.admin_pool import AdminStockService, RefillItem, Shortfall
from inventory.models import AdminStockBalance, AdminStockBatchBalance
from tests.factories import MedicineFactory, days_from_now, seed_admin_stock


@pytest.mark.django_db
class TestCheckAndDecrement:
    def test_decrements_when_sufficient(self):
        medicine = MedicineFactory()
        seed_admin_stock(medicine, 10)
        assert AdminStockService.check_and_decrement(medicine.pk, 4) is None
        assert AdminStockService.available(medicine.pk) == 6

    def test_shortfall_leaves_pool_untouched(self):
        medicine = MedicineFactory()
        seed_admin_stock(medicine, 3)
        shortfall = AdminStockService.check_and_decrement(medicine.pk, 5)
        assert shortfall == Shortfall(medicine_id=medicine.pk, available=3, required=5)
        assert AdminStockService.available(medicine.pk) == 3

    def test_missing_row_is_zero(self):
        medicine = MedicineFactory()
        assert AdminStockService.check_and_decrement(medicine.pk, 1).available == 0

    def test_check_reports_first_shortfall(self):
        a, b = MedicineFactory(), MedicineFactory()
        seed_admin_stock(a, 10)
        seed_admin_stock(b, 1)
        shortfall = AdminStockService.check({a.pk: 5, b.pk: 2})
        assert shortfall.medicine_id == b.pk
        assert AdminStockService.check({a.pk: 5}) is None


@pytest.mark.django_db
class TestBatchRows:
    def test_draw_batch_never_below_zero(self):
        medicine = MedicineFactory()
        seed_admin_stock(medicine, 5, batch_number='AB1', days_to_expiry=400)
        AdminStockService.draw_batch(medicine.pk, 'AB1', days_from_now(400), 8)
        assert AdminStockBatchBalance.objects.get(batch_number='AB1').quantity == 0

    def test_draw_unknown_batch_is_ignored(self):
        medicine = MedicineFactory()
        AdminStockService.draw_batch(medicine.pk, 'NOPE', days_from_now(400), 8)
        assert not AdminStockBatchBalance.objects.exists()

    def test_credit_restores_aggregate_and_batch(self):
        medicine = MedicineFactory()
        AdminStockService.credit(medicine.pk, 4, batch_number='AB2', expiry_date=days_from_now(300))
        assert AdminStockService.available(medicine.pk) == 4
        assert AdminStockBatchBalance.objects.get(batch_number='AB2').quantity == 4


@pytest.mark.django_db
class TestRefill:
    def test_refill_with_batch(self):
        medicine = MedicineFactory()
        AdminStockService.refill([
            RefillItem(medicine.pk, 10, 'RB1', days_from_now(200)),
            RefillItem(medicine.pk, 5, 'RB2', days_from_now(300)),
        ])
        assert AdminStockBalance.objects.get(medicine=medicine).quantity == 15
        assert [b.batch_number for b in AdminStockService.eligible_batches(medicine.pk)] == ['RB1', 'RB2']

    def test_refill_without_batch(self):
        medicine = MedicineFactory()
        AdminStockService.refill([RefillItem(medicine.pk, 10)])
        assert AdminStockService.available(medicine.pk) == 10
        assert not AdminStockBatchBalance.objects.exists()

    def test_expiry_too_soon(self):
        medicine = MedicineFactory()
        with pytest.raises(BusinessRuleViolation) as exc:
            AdminStockService.refill([
                RefillItem(medicine.pk, 10, 'OK', days_from_now(200)),
                RefillItem(medicine.pk, 10, 'SOON', days_from_now(90)),
            ])
        assert exc.value.reason == 'EXPIRY_TOO_SOON'
        assert AdminStockService.available(medicine.pk) == 0

    def test_batch_without_expiry(self):
        with pytest.raises(BusinessRuleViolation):
            AdminStockService.refill([RefillItem(MedicineFactory().pk, 10, 'RB1', None)])
