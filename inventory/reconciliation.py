"""
Inventory — Balance Reconciliation

Recomputes balances from the ledger: each batch row must equal the sum of
its ledger lines, each aggregate row the sum of its batch rows.

@file inventory/reconciliation.py
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date

from django.db import transaction
from django.db.models import Sum

from .models import StockBalance, StockBatchBalance, StockLedger

logger = logging.getLogger('clinicstock')


@dataclass(frozen=True)
class Drift:
    franchise_id: object
    medicine_id: object
    batch_number: str | None
    expiry_date: date | None
    recorded: int
    expected: int

    @property
    def is_aggregate(self) -> bool:
        return self.batch_number is None


def _expected_batches() -> dict:
    rows = (
        StockLedger.objects
        .values('franchise_id', 'medicine_id', 'batch_number', 'expiry_date')
        .annotate(total=Sum('qty_change'))
    )
    return {
        (r['franchise_id'], r['medicine_id'], r['batch_number'], r['expiry_date']): r['total'] or 0
        for r in rows
    }


def find_drift() -> list[Drift]:
    """Every batch and aggregate row whose stored quantity disagrees with the ledger."""
    expected_batches = _expected_batches()
    recorded_batches = {
        (r['franchise_id'], r['medicine_id'], r['batch_number'], r['expiry_date']): r['quantity']
        for r in StockBatchBalance.objects.values(
            'franchise_id', 'medicine_id', 'batch_number', 'expiry_date', 'quantity',
        )
    }

    drift = []
    expected_totals = defaultdict(int)
    for key in set(expected_batches) | set(recorded_batches):
        expected = expected_batches.get(key, 0)
        recorded = recorded_batches.get(key, 0)
        expected_totals[key[:2]] += expected
        if expected != recorded:
            drift.append(Drift(*key, recorded=recorded, expected=expected))

    recorded_totals = {
        (r['franchise_id'], r['medicine_id']): r['quantity']
        for r in StockBalance.objects.values('franchise_id', 'medicine_id', 'quantity')
    }
    for key in set(expected_totals) | set(recorded_totals):
        expected = expected_totals.get(key, 0)
        recorded = recorded_totals.get(key, 0)
        if expected != recorded:
            drift.append(Drift(key[0], key[1], None, None, recorded=recorded, expected=expected))
    return drift


@transaction.atomic
def rebuild_balances() -> list[Drift]:
    """Overwrite drifting rows with the ledger-derived quantities."""
    drift = find_drift()
    for item in drift:
        if item.is_aggregate:
            StockBalance.objects.update_or_create(
                franchise_id=item.franchise_id,
                medicine_id=item.medicine_id,
                defaults={'quantity': item.expected},
            )
            continue
        if item.expected < 0:
            logger.error(
                'Ledger for franchise=%s medicine=%s batch=%s sums to %d; batch left untouched.',
                item.franchise_id, item.medicine_id, item.batch_number, item.expected,
            )
            continue
        StockBatchBalance.objects.update_or_create(
            franchise_id=item.franchise_id,
            medicine_id=item.medicine_id,
            batch_number=item.batch_number,
            expiry_date=item.expiry_date,
            defaults={'quantity': item.expected},
        )
    if drift:
        logger.warning('Rebuilt %d drifting stock balance rows.', len(drift))
    return drift
