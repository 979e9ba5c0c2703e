"""
Inventory — Models

Batch-level stock per franchise, its aggregate cache, the append-only
stock ledger grouped under transaction headers, the head-office admin
pool and recall records.

Balances are mutated only through ``inventory.services``; the ledger is
INSERT ONLY apart from bulk deletion during a reversal.

@file inventory/models.py
"""

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.constants import NUMBER_PREFIX_STOCK_TRANSACTION
from core.models import BaseModel, TimestampMixin
from core.numbering import next_number


class BalanceRow(TimestampMixin):
    """Abstract base for quantity-on-hand rows."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    quantity = models.IntegerField(_('quantity'), default=0)

    class Meta:
        abstract = True


# ---------------------------------------------------------------------------
# Franchise balances
# ---------------------------------------------------------------------------

class StockBatchBalance(BalanceRow):
    """
    Quantity on hand for one (franchise, medicine, batch, expiry).
    Zero rows are kept; negative quantities are rejected by the database.
    """

    franchise = models.ForeignKey(
        'franchises.Franchise', on_delete=models.PROTECT,
        related_name='batch_balances', verbose_name=_('franchise'),
    )
    medicine = models.ForeignKey(
        'medicines.Medicine', on_delete=models.PROTECT,
        related_name='batch_balances', verbose_name=_('medicine'),
    )
    batch_number = models.CharField(_('batch number'), max_length=100)
    expiry_date = models.DateField(_('expiry date'), db_index=True)

    class Meta:
        verbose_name = _('stock batch balance')
        verbose_name_plural = _('stock batch balances')
        ordering = ['expiry_date', 'created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['franchise', 'medicine', 'batch_number', 'expiry_date'],
                name='unique_franchise_medicine_batch',
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0),
                name='batch_balance_non_negative',
            ),
        ]
        indexes = [
            models.Index(fields=['franchise', 'medicine', 'expiry_date'], name='batch_fefo_idx'),
        ]

    def __str__(self):
        return f'{self.batch_number} exp {self.expiry_date} qty={self.quantity}'

    @property
    def days_to_expiry(self) -> int:
        return (self.expiry_date - timezone.localdate()).days


class StockBalance(BalanceRow):
    """Aggregate quantity per (franchise, medicine); equals the sum of its batch rows."""

    franchise = models.ForeignKey(
        'franchises.Franchise', on_delete=models.PROTECT,
        related_name='stock_balances', verbose_name=_('franchise'),
    )
    medicine = models.ForeignKey(
        'medicines.Medicine', on_delete=models.PROTECT,
        related_name='stock_balances', verbose_name=_('medicine'),
    )

    class Meta:
        verbose_name = _('stock balance')
        verbose_name_plural = _('stock balances')
        ordering = ['franchise', 'medicine']
        constraints = [
            models.UniqueConstraint(
                fields=['franchise', 'medicine'],
                name='unique_franchise_medicine_balance',
            ),
        ]

    def __str__(self):
        return f'{self.franchise_id}:{self.medicine_id} qty={self.quantity}'


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------

class StockTransaction(BaseModel):
    """
    Header grouping the ledger lines of one business event.

    A bill, consultation or sale owns at most one header, identified by
    (reference_type, reference_id).
    """

    class TxnType(models.TextChoices):
        FRANCHISE_TO_PATIENT_SALE = 'FRANCHISE_TO_PATIENT_SALE', _('Franchise to patient sale')
        CONSULTATION_DISPENSE = 'CONSULTATION_DISPENSE', _('Consultation dispense')
        SALE_TO_FRANCHISE = 'SALE_TO_FRANCHISE', _('Sale to franchise')
        RECALL_FROM_FRANCHISE = 'RECALL_FROM_FRANCHISE', _('Recall from franchise')

    txn_type = models.CharField(
        _('type'), max_length=32, choices=TxnType.choices, db_index=True,
    )
    txn_no = models.CharField(_('number'), max_length=32, unique=True, editable=False)
    txn_date = models.DateTimeField(_('date'), default=timezone.now, db_index=True)
    franchise = models.ForeignKey(
        'franchises.Franchise', on_delete=models.PROTECT,
        related_name='stock_transactions', verbose_name=_('franchise'),
    )
    reference_type = models.CharField(
        _('reference type'), max_length=50, blank=True,
        help_text=_('Model name of the source record'),
    )
    reference_id = models.UUIDField(_('reference ID'), null=True, blank=True)
    notes = models.TextField(_('notes'), blank=True)

    class Meta:
        verbose_name = _('stock transaction')
        verbose_name_plural = _('stock transactions')
        ordering = ['-txn_date', '-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['reference_type', 'reference_id'],
                condition=models.Q(reference_id__isnull=False),
                name='unique_stock_txn_reference',
            ),
        ]
        indexes = [
            models.Index(fields=['franchise', 'txn_date']),
        ]

    def __str__(self):
        return f'{self.txn_no} ({self.txn_type})'

    def save(self, *args, **kwargs):
        if not self.txn_no:
            self.txn_no = next_number(
                StockTransaction, 'txn_no', NUMBER_PREFIX_STOCK_TRANSACTION, on=self.txn_date,
            )
        super().save(*args, **kwargs)


class StockLedger(models.Model):
    """
    One immutable quantity movement against a franchise batch.
    Negative qty_change is an outflow, positive an inflow.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    transaction = models.ForeignKey(
        StockTransaction, on_delete=models.CASCADE,
        related_name='lines', verbose_name=_('transaction'),
    )
    franchise = models.ForeignKey(
        'franchises.Franchise', on_delete=models.PROTECT,
        related_name='ledger_lines', verbose_name=_('franchise'),
    )
    medicine = models.ForeignKey(
        'medicines.Medicine', on_delete=models.PROTECT,
        related_name='ledger_lines', verbose_name=_('medicine'),
    )
    batch_number = models.CharField(_('batch number'), max_length=100)
    expiry_date = models.DateField(_('expiry date'))
    qty_change = models.IntegerField(_('quantity change'))
    rate = models.DecimalField(_('rate'), max_digits=10, decimal_places=2)
    amount = models.DecimalField(_('amount'), max_digits=12, decimal_places=2)
    created_at = models.DateTimeField(_('created at'), auto_now_add=True, db_index=True)
    # No updated_at; ledger lines are never modified.

    class Meta:
        verbose_name = _('stock ledger line')
        verbose_name_plural = _('stock ledger')
        ordering = ['created_at']
        indexes = [
            models.Index(
                fields=['franchise', 'medicine', 'batch_number', 'expiry_date'],
                name='ledger_batch_idx',
            ),
        ]

    def __str__(self):
        return f'{self.qty_change:+d} {self.medicine_id} batch={self.batch_number}'

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise NotImplementedError('StockLedger is insert-only; updates are not allowed.')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise NotImplementedError('StockLedger lines are removed only by reversing their transaction.')


# ---------------------------------------------------------------------------
# Admin pool
# ---------------------------------------------------------------------------

class AdminStockBalance(BalanceRow):
    """Head-office quantity per medicine, not yet assigned to any franchise."""

    medicine = models.OneToOneField(
        'medicines.Medicine', on_delete=models.PROTECT,
        related_name='admin_balance', verbose_name=_('medicine'),
    )

    class Meta:
        verbose_name = _('admin stock balance')
        verbose_name_plural = _('admin stock balances')
        ordering = ['medicine']

    def __str__(self):
        return f'admin:{self.medicine_id} qty={self.quantity}'


class AdminStockBatchBalance(BalanceRow):
    """Head-office quantity per refilled batch."""

    medicine = models.ForeignKey(
        'medicines.Medicine', on_delete=models.PROTECT,
        related_name='admin_batch_balances', verbose_name=_('medicine'),
    )
    batch_number = models.CharField(_('batch number'), max_length=100)
    expiry_date = models.DateField(_('expiry date'))

    class Meta:
        verbose_name = _('admin stock batch balance')
        verbose_name_plural = _('admin stock batch balances')
        ordering = ['expiry_date', 'created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['medicine', 'batch_number', 'expiry_date'],
                name='unique_admin_medicine_batch',
            ),
        ]

    def __str__(self):
        return f'admin:{self.batch_number} exp {self.expiry_date} qty={self.quantity}'


# ---------------------------------------------------------------------------
# Recall
# ---------------------------------------------------------------------------

class StockRecall(models.Model):
    """Record of stock withdrawn from a franchise batch close to expiry."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    stock_transaction = models.OneToOneField(
        StockTransaction, on_delete=models.PROTECT,
        related_name='recall', verbose_name=_('stock transaction'),
    )
    franchise = models.ForeignKey(
        'franchises.Franchise', on_delete=models.PROTECT,
        related_name='recalls', verbose_name=_('franchise'),
    )
    medicine = models.ForeignKey(
        'medicines.Medicine', on_delete=models.PROTECT,
        related_name='recalls', verbose_name=_('medicine'),
    )
    batch_number = models.CharField(_('batch number'), max_length=100)
    expiry_date = models.DateField(_('expiry date'))
    quantity = models.PositiveIntegerField(_('quantity'))
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='+',
        verbose_name=_('created by'),
    )
    recalled_at = models.DateTimeField(_('recalled at'), default=timezone.now, db_index=True)

    class Meta:
        verbose_name = _('stock recall')
        verbose_name_plural = _('stock recalls')
        ordering = ['-recalled_at']

    def __str__(self):
        return f'Recall {self.quantity} of {self.batch_number}'
