"""
Inventory — Reconciliation Tests

@file inventory/tests/test_reconciliation.py
"""

from io import StringIO

import pytest
from django.core.management import call_command

from inventory.models import StockBalance, StockBatchBalance, StockTransaction
from inventory.reconciliation import find_drift, rebuild_balances
from inventory.services import InboundLine, LedgerService
from inventory.tasks import reconcile_stock_balances_task
from tests.factories import FranchiseFactory, MedicineFactory, days_from_now


@pytest.fixture
def posted(db):
    franchise, medicine = FranchiseFactory(), MedicineFactory()
    txn = LedgerService.open_transaction(
        txn_type=StockTransaction.TxnType.SALE_TO_FRANCHISE, franchise_id=franchise.pk,
    )
    LedgerService.post_inbound(txn, [InboundLine(medicine.pk, 'R1', days_from_now(300), 12, 1)])
    return franchise, medicine


@pytest.mark.django_db
class TestFindDrift:
    def test_clean_after_posting(self, posted):
        assert find_drift() == []

    def test_detects_batch_and_aggregate_drift(self, posted):
        franchise, medicine = posted
        StockBatchBalance.objects.filter(batch_number='R1').update(quantity=7)
        StockBalance.objects.filter(franchise=franchise).update(quantity=30)
        drift = find_drift()
        assert {(d.is_aggregate, d.recorded, d.expected) for d in drift} == {(False, 7, 12), (True, 30, 12)}

    def test_rebuild_repairs(self, posted):
        franchise, _ = posted
        StockBalance.objects.filter(franchise=franchise).update(quantity=30)
        assert len(rebuild_balances()) == 1
        assert StockBalance.objects.get(franchise=franchise).quantity == 12
        assert find_drift() == []


@pytest.mark.django_db
class TestRebuildCommand:
    def test_check_does_not_write(self, posted):
        franchise, _ = posted
        StockBalance.objects.filter(franchise=franchise).update(quantity=30)
        out = StringIO()
        call_command('rebuild_stock_balances', '--check', stdout=out)
        assert '30 -> 12' in out.getvalue()
        assert StockBalance.objects.get(franchise=franchise).quantity == 30

    def test_rebuild(self, posted):
        franchise, _ = posted
        StockBalance.objects.filter(franchise=franchise).update(quantity=30)
        call_command('rebuild_stock_balances', stdout=StringIO())
        assert StockBalance.objects.get(franchise=franchise).quantity == 12


@pytest.mark.django_db
class TestReconcileTask:
    def test_reports_drift_count(self, posted):
        StockBatchBalance.objects.filter(batch_number='R1').update(quantity=1)
        assert reconcile_stock_balances_task() == {'drift_count': 1}
