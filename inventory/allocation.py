"""
Inventory — Allocation Engine

FEFO (first-expiry-first-out) allocation of a requested quantity across a
franchise's batches. Only batches with quantity > 0 and an expiry date
strictly beyond ``as_of + safety horizon`` are eligible.

``plan_allocation`` is pure and works on already-fetched rows.
``BatchPool`` loads and locks eligible rows once per medicine and keeps a
working copy, so several lines of one request never claim the same units.

@file inventory/allocation.py
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta

from django.conf import settings
from django.utils import timezone

from core.exceptions import BusinessRuleViolation, InsufficientStockError

from .models import StockBatchBalance


@dataclass(frozen=True)
class AllocationLine:
    batch_id: object
    batch_number: str
    expiry_date: date
    quantity: int


@dataclass
class AllocationPlan:
    franchise_id: object
    medicine_id: object
    lines: list[AllocationLine] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(line.quantity for line in self.lines)


@dataclass
class _Batch:
    """Mutable working copy of a batch row."""

    id: object
    batch_number: str
    expiry_date: date
    quantity: int


def horizon_cutoff(as_of=None, safety_horizon_days=None) -> date:
    """Last expiry date that is NOT eligible for allocation."""
    if safety_horizon_days is None:
        safety_horizon_days = settings.STOCK_SAFETY_HORIZON_DAYS
    if as_of is None:
        day = timezone.localdate()
    elif isinstance(as_of, date) and not hasattr(as_of, 'hour'):
        day = as_of
    else:
        day = timezone.localdate(as_of)
    return day + timedelta(days=safety_horizon_days)


def plan_allocation(batches, requested_qty: int, *, medicine_id=None, medicine_name='') -> list[AllocationLine]:
    """
    Greedy FEFO walk over ``batches`` (already filtered for eligibility and
    ordered by expiry, then creation).

    Raises InsufficientStockError when the batches cannot cover the request;
    nothing is assigned in that case.
    """
    if requested_qty <= 0:
        raise BusinessRuleViolation(detail='Requested quantity must be positive.')

    available = sum(max(b.quantity, 0) for b in batches)
    if available < requested_qty:
        raise InsufficientStockError(
            medicine_id=medicine_id,
            medicine_name=medicine_name,
            available=available,
            required=requested_qty,
        )

    lines = []
    remaining = requested_qty
    for batch in batches:
        if remaining == 0:
            break
        take = min(remaining, batch.quantity)
        if take <= 0:
            continue
        lines.append(AllocationLine(
            batch_id=batch.id,
            batch_number=batch.batch_number,
            expiry_date=batch.expiry_date,
            quantity=take,
        ))
        remaining -= take
    return lines


def eligible_batches(franchise_id, medicine_id, *, as_of=None, safety_horizon_days=None, lock=False):
    """Eligible batch rows in FEFO order."""
    qs = StockBatchBalance.objects.filter(
        franchise_id=franchise_id,
        medicine_id=medicine_id,
        quantity__gt=0,
        expiry_date__gt=horizon_cutoff(as_of, safety_horizon_days),
    ).order_by('expiry_date', 'created_at', 'id')
    if lock:
        qs = qs.select_for_update()
    return qs


class BatchPool:
    """
    Working copy of one franchise's eligible batches for the duration of
    a unit of work. Rows are locked on first use of each medicine.
    """

    def __init__(self, franchise_id, *, as_of=None, safety_horizon_days=None, lock=True):
        self.franchise_id = franchise_id
        self.as_of = as_of
        self.safety_horizon_days = safety_horizon_days
        self.lock = lock
        self._batches: dict[str, list[_Batch]] = {}

    def _load(self, medicine_id) -> list[_Batch]:
        key = str(medicine_id)
        if key not in self._batches:
            rows = eligible_batches(
                self.franchise_id, medicine_id,
                as_of=self.as_of,
                safety_horizon_days=self.safety_horizon_days,
                lock=self.lock,
            )
            self._batches[key] = [
                _Batch(r.pk, r.batch_number, r.expiry_date, r.quantity) for r in rows
            ]
        return self._batches[key]

    def available(self, medicine_id) -> int:
        return sum(b.quantity for b in self._load(medicine_id))

    def check(self, medicine_id, requested_qty: int, medicine_name='') -> None:
        """Raise InsufficientStockError without claiming anything."""
        available = self.available(medicine_id)
        if available < requested_qty:
            raise InsufficientStockError(
                medicine_id=medicine_id,
                medicine_name=medicine_name,
                available=available,
                required=requested_qty,
            )

    def allocate(self, medicine_id, requested_qty: int, medicine_name='') -> AllocationPlan:
        batches = self._load(medicine_id)
        lines = plan_allocation(
            batches, requested_qty,
            medicine_id=medicine_id, medicine_name=medicine_name,
        )
        by_id = {b.id: b for b in batches}
        for line in lines:
            by_id[line.batch_id].quantity -= line.quantity
        return AllocationPlan(self.franchise_id, medicine_id, lines)


def allocate(franchise_id, medicine_id, requested_qty: int, as_of=None,
             safety_horizon_days=None, medicine_name='') -> AllocationPlan:
    """Single-line allocation against freshly loaded (and locked) batches."""
    pool = BatchPool(
        franchise_id, as_of=as_of, safety_horizon_days=safety_horizon_days,
    )
    return pool.allocate(medicine_id, requested_qty, medicine_name=medicine_name)


def plan_lines(pool: BatchPool, lines, names: dict | None = None) -> list[AllocationPlan]:
    """
    Plan several ``(medicine_id, qty)`` lines against one pool.

    Duplicate medicines are summed and checked once before any line is
    planned, so the error reports the whole requirement. Nothing is
    written to the database.
    """
    names = names or {}
    required = defaultdict(int)
    ids = {}
    for medicine_id, qty in lines:
        required[str(medicine_id)] += qty
        ids[str(medicine_id)] = medicine_id
    for key, qty in required.items():
        pool.check(ids[key], qty, medicine_name=names.get(key, ''))
    return [
        pool.allocate(medicine_id, qty, medicine_name=names.get(str(medicine_id), ''))
        for medicine_id, qty in lines
    ]
