"""
Inventory — Admin Stock Pool

Head-office stock awaiting transport to franchises. The aggregate row per
medicine is authoritative for delivery checks; batch rows record what was
refilled and are drawn down alongside it when a delivery names a batch.

@file inventory/admin_pool.py
"""

import logging
from dataclasses import dataclass
from datetime import date

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.db.models.functions import Greatest
from django.utils import timezone

from core.constants import AUDIT_ACTION_STOCK_POSTING
from core.exceptions import BusinessRuleViolation
from core.services import AuditService

from .allocation import horizon_cutoff
from .models import AdminStockBalance, AdminStockBatchBalance
from .services import upsert_increment

logger = logging.getLogger('clinicstock')


@dataclass(frozen=True)
class Shortfall:
    """Structured insufficiency signal for one medicine."""

    medicine_id: object
    available: int
    required: int


@dataclass(frozen=True)
class RefillItem:
    medicine_id: object
    quantity: int
    batch_number: str | None = None
    expiry_date: date | None = None


class AdminStockService:

    @staticmethod
    def available(medicine_id, *, lock: bool = False) -> int:
        qs = AdminStockBalance.objects.filter(medicine_id=medicine_id)
        if lock:
            qs = qs.select_for_update()
        return qs.values_list('quantity', flat=True).first() or 0

    @classmethod
    def check(cls, requirements: dict) -> Shortfall | None:
        """First shortfall among ``{medicine_id: qty}``, locking the rows read."""
        for medicine_id, qty in requirements.items():
            available = cls.available(medicine_id, lock=True)
            if available < qty:
                return Shortfall(medicine_id=medicine_id, available=available, required=qty)
        return None

    @classmethod
    def check_and_decrement(cls, medicine_id, qty: int) -> Shortfall | None:
        """Conditional decrement; returns a Shortfall instead of raising."""
        updated = AdminStockBalance.objects.filter(
            medicine_id=medicine_id, quantity__gte=qty,
        ).update(quantity=F('quantity') - qty, updated_at=timezone.now())
        if updated:
            return None
        return Shortfall(medicine_id=medicine_id, available=cls.available(medicine_id), required=qty)

    @staticmethod
    def draw_batch(medicine_id, batch_number, expiry_date, qty: int) -> None:
        """Draw down a refilled batch row, if one exists, never below zero."""
        if not batch_number or not expiry_date:
            return
        AdminStockBatchBalance.objects.filter(
            medicine_id=medicine_id, batch_number=batch_number, expiry_date=expiry_date,
        ).update(quantity=Greatest(F('quantity') - qty, 0), updated_at=timezone.now())

    @staticmethod
    def credit(medicine_id, qty: int, *, batch_number=None, expiry_date=None) -> None:
        """Put quantity back into the pool (sale reversal)."""
        upsert_increment(AdminStockBalance, {'medicine_id': medicine_id}, qty)
        if batch_number and expiry_date:
            upsert_increment(AdminStockBatchBalance, {
                'medicine_id': medicine_id,
                'batch_number': batch_number,
                'expiry_date': expiry_date,
            }, qty)

    @staticmethod
    def validate_refill(items) -> None:
        cutoff = horizon_cutoff()
        for item in items:
            if item.quantity <= 0:
                raise BusinessRuleViolation(detail='Quantity must be positive.')
            if bool(item.batch_number) != bool(item.expiry_date):
                raise BusinessRuleViolation(
                    detail='batch_number and expiry_date must be supplied together.',
                )
            if item.expiry_date and item.expiry_date <= cutoff:
                raise BusinessRuleViolation(
                    detail=f'This batch expiry should be above {settings.STOCK_SAFETY_HORIZON_DAYS} days.',
                    code='EXPIRY_TOO_SOON',
                )

    @classmethod
    @transaction.atomic
    def refill(cls, items, *, actor=None) -> list[AdminStockBalance]:
        """Top up the pool. All items are validated before any write."""
        cls.validate_refill(items)
        touched = {}
        for item in items:
            if item.batch_number:
                upsert_increment(AdminStockBatchBalance, {
                    'medicine_id': item.medicine_id,
                    'batch_number': item.batch_number,
                    'expiry_date': item.expiry_date,
                }, item.quantity)
            touched[str(item.medicine_id)] = upsert_increment(
                AdminStockBalance, {'medicine_id': item.medicine_id}, item.quantity,
            )

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_STOCK_POSTING,
            model_name='AdminStockBalance',
            object_id='refill',
            new_values={
                'items': [
                    {
                        'medicine_id': str(i.medicine_id),
                        'quantity': i.quantity,
                        'batch_number': i.batch_number,
                        'expiry_date': i.expiry_date.isoformat() if i.expiry_date else None,
                    }
                    for i in items
                ],
            },
        )
        logger.info('Admin stock refilled: %d items by %s.', len(items), actor)
        return list(touched.values())

    @staticmethod
    def eligible_batches(medicine_id):
        """Refilled batches still beyond the safety horizon, soonest expiry first."""
        return AdminStockBatchBalance.objects.filter(
            medicine_id=medicine_id,
            quantity__gt=0,
            expiry_date__gt=horizon_cutoff(),
        ).order_by('expiry_date', 'created_at')
