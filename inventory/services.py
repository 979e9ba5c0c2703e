"""
Inventory — Service Layer

Ledger and balance mutation. Every function here expects to run inside
the caller's ``transaction.atomic`` block; callers own the unit of work.

Batch decrements are conditional updates (``WHERE quantity >= n``), so a
concurrent writer that got there first turns into InsufficientStockError
instead of a negative balance. Increments go through ``upsert_increment``.

@file inventory/services.py
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from core.constants import AUDIT_ACTION_STOCK_POSTING, AUDIT_ACTION_STOCK_REVERSAL
from core.exceptions import (
    BusinessRuleViolation,
    InsufficientStockError,
    InvalidReferenceError,
)
from core.services import AuditService
from medicines.models import Medicine

from .allocation import AllocationPlan
from .models import (
    StockBalance,
    StockBatchBalance,
    StockLedger,
    StockRecall,
    StockTransaction,
)

logger = logging.getLogger('clinicstock')


@dataclass(frozen=True)
class InboundLine:
    """A positive movement into a franchise batch."""

    medicine_id: object
    batch_number: str
    expiry_date: date
    quantity: int
    rate: Decimal


def upsert_increment(model, lookup: dict, delta: int):
    """
    Create the row identified by ``lookup`` at zero if absent, then apply
    ``quantity = quantity + delta`` in a single UPDATE. Returns the row
    with its fresh quantity.
    """
    row, _ = model.objects.select_for_update().get_or_create(
        **lookup, defaults={'quantity': 0},
    )
    if delta:
        model.objects.filter(pk=row.pk).update(
            quantity=F('quantity') + delta, updated_at=timezone.now(),
        )
        row.refresh_from_db(fields=['quantity'])
    return row


def _medicine_name(medicine_id) -> str:
    return Medicine.objects.filter(pk=medicine_id).values_list('name', flat=True).first() or ''


def _take_from_batch(batch_filter: dict, qty: int, medicine_id) -> None:
    """Conditional decrement of one batch row."""
    updated = StockBatchBalance.objects.filter(
        **batch_filter, quantity__gte=qty,
    ).update(quantity=F('quantity') - qty, updated_at=timezone.now())
    if updated == 1:
        return
    current = StockBatchBalance.objects.filter(**batch_filter).values_list('quantity', flat=True).first()
    raise InsufficientStockError(
        medicine_id=medicine_id,
        medicine_name=_medicine_name(medicine_id),
        available=current or 0,
        required=qty,
    )


class LedgerService:
    """Headers, ledger lines and the balance updates that go with them."""

    @staticmethod
    def open_transaction(*, txn_type: str, franchise_id, actor=None, reference=None,
                         txn_date=None, notes: str = '') -> StockTransaction:
        txn = StockTransaction(
            txn_type=txn_type,
            franchise_id=franchise_id,
            created_by=actor,
            txn_date=txn_date or timezone.now(),
            notes=notes or '',
        )
        if reference is not None:
            txn.reference_type = type(reference).__name__
            txn.reference_id = reference.pk
        txn.save()
        return txn

    @staticmethod
    def transaction_for(reference, *, lock: bool = True) -> StockTransaction | None:
        qs = StockTransaction.objects.filter(
            reference_type=type(reference).__name__, reference_id=reference.pk,
        )
        if lock:
            qs = qs.select_for_update()
        return qs.first()

    @staticmethod
    def apply_allocation(txn: StockTransaction, plan: AllocationPlan, rate: Decimal) -> list[StockLedger]:
        """
        Post an outflow: one ledger line per plan line at ``rate``, a
        conditional decrement per batch and one aggregate decrement.
        """
        if not plan.lines:
            return []
        rate = Decimal(rate)
        entries = [
            StockLedger(
                transaction=txn,
                franchise_id=plan.franchise_id,
                medicine_id=plan.medicine_id,
                batch_number=line.batch_number,
                expiry_date=line.expiry_date,
                qty_change=-line.quantity,
                rate=rate,
                amount=rate * line.quantity,
            )
            for line in plan.lines
        ]
        for line in plan.lines:
            _take_from_batch({'pk': line.batch_id}, line.quantity, plan.medicine_id)
        upsert_increment(
            StockBalance,
            {'franchise_id': plan.franchise_id, 'medicine_id': plan.medicine_id},
            -plan.total,
        )
        return StockLedger.objects.bulk_create(entries)

    @staticmethod
    def post_inbound(txn: StockTransaction, lines) -> list[StockLedger]:
        """Post an inflow into ``txn.franchise``: positive lines plus balance increments."""
        franchise_id = txn.franchise_id
        entries = []
        by_batch = defaultdict(int)
        by_medicine = defaultdict(int)
        for line in lines:
            if line.quantity <= 0:
                continue
            rate = Decimal(line.rate)
            entries.append(StockLedger(
                transaction=txn,
                franchise_id=franchise_id,
                medicine_id=line.medicine_id,
                batch_number=line.batch_number,
                expiry_date=line.expiry_date,
                qty_change=line.quantity,
                rate=rate,
                amount=rate * line.quantity,
            ))
            by_batch[(line.medicine_id, line.batch_number, line.expiry_date)] += line.quantity
            by_medicine[line.medicine_id] += line.quantity

        for (medicine_id, batch_number, expiry_date), qty in by_batch.items():
            upsert_increment(StockBatchBalance, {
                'franchise_id': franchise_id,
                'medicine_id': medicine_id,
                'batch_number': batch_number,
                'expiry_date': expiry_date,
            }, qty)
        for medicine_id, qty in by_medicine.items():
            upsert_increment(
                StockBalance, {'franchise_id': franchise_id, 'medicine_id': medicine_id}, qty,
            )
        return StockLedger.objects.bulk_create(entries)

    @staticmethod
    def _apply_deltas(franchise_id, deltas: dict) -> None:
        """
        Apply signed per-batch deltas keyed by (medicine, batch, expiry).
        Negative deltas are conditional decrements, positive ones upserts.
        """
        by_medicine = defaultdict(int)
        for (medicine_id, batch_number, expiry_date), delta in deltas.items():
            if delta == 0:
                continue
            lookup = {
                'franchise_id': franchise_id,
                'medicine_id': medicine_id,
                'batch_number': batch_number,
                'expiry_date': expiry_date,
            }
            if delta < 0:
                _take_from_batch(lookup, -delta, medicine_id)
            else:
                upsert_increment(StockBatchBalance, lookup, delta)
            by_medicine[medicine_id] += delta
        for medicine_id, delta in by_medicine.items():
            if delta:
                upsert_increment(
                    StockBalance, {'franchise_id': franchise_id, 'medicine_id': medicine_id}, delta,
                )

    @classmethod
    def reverse_transaction(cls, txn: StockTransaction, *, actor=None) -> dict:
        """
        Undo every ledger line of ``txn`` on its franchise's balances and
        delete the lines. Returns the per-medicine quantity that was put
        back (negative when an inflow was taken back out).
        """
        lines = list(txn.lines.all())
        if not lines:
            return {}
        deltas = defaultdict(int)
        per_medicine = defaultdict(int)
        for line in lines:
            deltas[(line.medicine_id, line.batch_number, line.expiry_date)] -= line.qty_change
            per_medicine[line.medicine_id] -= line.qty_change

        cls._apply_deltas(txn.franchise_id, deltas)
        txn.lines.all().delete()

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_STOCK_REVERSAL,
            model_name='StockTransaction',
            object_id=str(txn.pk),
            new_values={
                'txn_no': txn.txn_no,
                'lines': len(lines),
                'quantities': {str(k): v for k, v in per_medicine.items()},
            },
        )
        logger.info('Reversed %s: %d lines on franchise %s.', txn.txn_no, len(lines), txn.franchise_id)
        return dict(per_medicine)

    @classmethod
    def repoint_transaction(cls, txn: StockTransaction, franchise_id, *, actor=None) -> list[StockLedger]:
        """
        Move a posted transaction to another franchise: reverse it on the
        old franchise, then re-create the same lines on the new one.
        """
        lines = list(txn.lines.all())
        cls.reverse_transaction(txn, actor=actor)
        txn.franchise_id = franchise_id
        txn.updated_by = actor
        txn.save(update_fields=['franchise', 'updated_by', 'updated_at'])

        deltas = defaultdict(int)
        for line in lines:
            deltas[(line.medicine_id, line.batch_number, line.expiry_date)] += line.qty_change
        cls._apply_deltas(franchise_id, deltas)
        return StockLedger.objects.bulk_create([
            StockLedger(
                transaction=txn,
                franchise_id=franchise_id,
                medicine_id=line.medicine_id,
                batch_number=line.batch_number,
                expiry_date=line.expiry_date,
                qty_change=line.qty_change,
                rate=line.rate,
                amount=line.amount,
            )
            for line in lines
        ])

    @staticmethod
    def log_posting(txn: StockTransaction, *, actor=None, line_count: int, extra: dict | None = None) -> None:
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_STOCK_POSTING,
            model_name='StockTransaction',
            object_id=str(txn.pk),
            new_values={
                'txn_no': txn.txn_no,
                'txn_type': txn.txn_type,
                'franchise_id': str(txn.franchise_id),
                'lines': line_count,
                **(extra or {}),
            },
        )
        logger.info(
            'Stock posted %s (%s) franchise=%s lines=%d',
            txn.txn_no, txn.txn_type, txn.franchise_id, line_count,
        )


class RecallService:
    """Withdrawal of near-expiry stock from a franchise batch."""

    @staticmethod
    @transaction.atomic
    def recall(*, franchise_id, medicine_id, batch_number: str, expiry_date: date,
               quantity: int, actor=None, notes: str = '') -> StockRecall:
        if quantity <= 0:
            raise BusinessRuleViolation(detail='Quantity must be positive.')

        window_end = timezone.localdate() + timedelta(days=settings.STOCK_RECALL_WINDOW_DAYS)
        if expiry_date > window_end:
            raise BusinessRuleViolation(
                detail=(
                    'Recall is only allowed for expiring stock '
                    f'(within {settings.STOCK_RECALL_WINDOW_DAYS} days).'
                ),
                code='BATCH_NOT_RECALLABLE',
            )

        batch = (
            StockBatchBalance.objects.select_for_update()
            .select_related('medicine')
            .filter(
                franchise_id=franchise_id,
                medicine_id=medicine_id,
                batch_number=batch_number,
                expiry_date=expiry_date,
            )
            .first()
        )
        if batch is None:
            raise InvalidReferenceError(detail='Stock batch not found.')
        if batch.quantity < quantity:
            raise InsufficientStockError(
                medicine_id=medicine_id,
                medicine_name=batch.medicine.name,
                available=batch.quantity,
                required=quantity,
            )

        txn = LedgerService.open_transaction(
            txn_type=StockTransaction.TxnType.RECALL_FROM_FRANCHISE,
            franchise_id=franchise_id,
            actor=actor,
            notes=notes,
        )
        rate = batch.medicine.rate
        StockLedger.objects.create(
            transaction=txn,
            franchise_id=franchise_id,
            medicine_id=medicine_id,
            batch_number=batch_number,
            expiry_date=expiry_date,
            qty_change=-quantity,
            rate=rate,
            amount=rate * quantity,
        )
        _take_from_batch({'pk': batch.pk}, quantity, medicine_id)
        upsert_increment(
            StockBalance, {'franchise_id': franchise_id, 'medicine_id': medicine_id}, -quantity,
        )
        recall = StockRecall.objects.create(
            stock_transaction=txn,
            franchise_id=franchise_id,
            medicine_id=medicine_id,
            batch_number=batch_number,
            expiry_date=expiry_date,
            quantity=quantity,
            created_by=actor,
        )
        LedgerService.log_posting(txn, actor=actor, line_count=1, extra={'recall_id': str(recall.pk)})
        return recall
