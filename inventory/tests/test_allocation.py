"""
Inventory — Allocation Engine Tests

FEFO ordering, horizon exclusion and the all-or-nothing plan.

@file inventory/tests/test_allocation.py
"""

from collections import namedtuple
from datetime import date

import pytest

from core.exceptions import BusinessRuleViolation, InsufficientStockError
from inventory.allocation import (
    BatchPool,
    allocate,
    eligible_batches,
    horizon_cutoff,
    plan_allocation,
    plan_lines,
)
from tests.factories import FranchiseFactory, MedicineFactory, seed_batches

Row = namedtuple('Row', 'id batch_number expiry_date quantity')


class TestPlanAllocation:
    batches = [
        Row(1, 'A', date(2027, 1, 1), 4),
        Row(2, 'B', date(2027, 6, 1), 5),
        Row(3, 'C', date(2028, 1, 1), 10),
    ]

    def test_earliest_expiry_first(self):
        lines = plan_allocation(self.batches, 7)
        assert [(l.batch_number, l.quantity) for l in lines] == [('A', 4), ('B', 3)]

    def test_exact_fit_single_batch(self):
        lines = plan_allocation(self.batches, 4)
        assert [(l.batch_number, l.quantity) for l in lines] == [('A', 4)]

    def test_conserves_quantity(self):
        assert sum(l.quantity for l in plan_allocation(self.batches, 19)) == 19

    def test_insufficient(self):
        with pytest.raises(InsufficientStockError) as exc:
            plan_allocation(self.batches, 20, medicine_name='Paracetamol')
        assert exc.value.available == 19
        assert exc.value.required == 20

    @pytest.mark.parametrize('qty', [0, -3])
    def test_non_positive_request(self, qty):
        with pytest.raises(BusinessRuleViolation):
            plan_allocation(self.batches, qty)

    def test_skips_empty_rows(self):
        rows = [Row(1, 'A', date(2027, 1, 1), 0), Row(2, 'B', date(2027, 2, 1), 2)]
        assert [l.batch_number for l in plan_allocation(rows, 2)] == ['B']


class TestHorizonCutoff:
    def test_from_date(self):
        assert horizon_cutoff(date(2026, 1, 1), 90) == date(2026, 4, 1)


@pytest.mark.django_db
class TestEligibleBatches:
    def test_horizon_excludes_near_expiry(self):
        franchise, medicine = FranchiseFactory(), MedicineFactory()
        seed_batches(franchise, medicine, [('SOON', 30, 100), ('EDGE', 90, 100), ('OK', 91, 5)])
        assert [b.batch_number for b in eligible_batches(franchise.pk, medicine.pk)] == ['OK']

    def test_zero_quantity_excluded(self):
        franchise, medicine = FranchiseFactory(), MedicineFactory()
        seed_batches(franchise, medicine, [('EMPTY', 200, 0), ('FULL', 300, 1)])
        assert [b.batch_number for b in eligible_batches(franchise.pk, medicine.pk)] == ['FULL']

    def test_other_franchise_excluded(self):
        medicine = MedicineFactory()
        seed_batches(FranchiseFactory(), medicine, [('X', 200, 5)])
        assert list(eligible_batches(FranchiseFactory().pk, medicine.pk)) == []


@pytest.mark.django_db
class TestBatchPool:
    def test_allocate_orders_by_expiry(self):
        franchise, medicine = FranchiseFactory(), MedicineFactory()
        seed_batches(franchise, medicine, [('LATE', 400, 10), ('EARLY', 120, 3)])
        plan = allocate(franchise.pk, medicine.pk, 5)
        assert [(l.batch_number, l.quantity) for l in plan.lines] == [('EARLY', 3), ('LATE', 2)]
        assert plan.total == 5

    def test_lines_do_not_double_claim(self):
        franchise, medicine = FranchiseFactory(), MedicineFactory()
        seed_batches(franchise, medicine, [('A', 120, 3), ('B', 200, 3)])
        pool = BatchPool(franchise.pk)
        first = pool.allocate(medicine.pk, 2)
        second = pool.allocate(medicine.pk, 2)
        assert [(l.batch_number, l.quantity) for l in first.lines] == [('A', 2)]
        assert [(l.batch_number, l.quantity) for l in second.lines] == [('A', 1), ('B', 1)]
        assert pool.available(medicine.pk) == 2

    def test_horizon_override(self):
        franchise, medicine = FranchiseFactory(), MedicineFactory()
        seed_batches(franchise, medicine, [('A', 30, 3)])
        assert BatchPool(franchise.pk, safety_horizon_days=10).available(medicine.pk) == 3
        assert BatchPool(franchise.pk).available(medicine.pk) == 0


@pytest.mark.django_db
class TestPlanLines:
    def test_duplicate_medicine_checked_as_a_whole(self):
        franchise, medicine = FranchiseFactory(), MedicineFactory()
        seed_batches(franchise, medicine, [('A', 200, 5)])
        with pytest.raises(InsufficientStockError) as exc:
            plan_lines(BatchPool(franchise.pk), [(medicine.pk, 3), (medicine.pk, 3)], {str(medicine.pk): 'Zinc'})
        assert exc.value.required == 6
        assert exc.value.available == 5
        assert exc.value.medicine_name == 'Zinc'

    def test_plans_each_line(self):
        franchise = FranchiseFactory()
        a, b = MedicineFactory(), MedicineFactory()
        seed_batches(franchise, a, [('A1', 200, 5)])
        seed_batches(franchise, b, [('B1', 200, 5)])
        plans = plan_lines(BatchPool(franchise.pk), [(a.pk, 2), (b.pk, 5), (a.pk, 3)])
        assert [p.total for p in plans] == [2, 5, 3]
