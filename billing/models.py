"""
Billing — Models

Over-the-counter medicine bills issued by a franchise to patients, their
lines, and the receipts that settle them.

@file billing/models.py
"""

import uuid

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.constants import NUMBER_PREFIX_MEDICINE_BILL, NUMBER_PREFIX_MEDICINE_BILL_RECEIPT
from core.models import BaseModel, ReceiptBase
from core.numbering import next_number


class MedicineBill(BaseModel):
    bill_number = models.CharField(_('bill number'), max_length=32, unique=True, editable=False)
    bill_date = models.DateTimeField(_('bill date'), default=timezone.now, db_index=True)
    franchise = models.ForeignKey(
        'franchises.Franchise', on_delete=models.PROTECT,
        related_name='medicine_bills', verbose_name=_('franchise'),
    )
    patient = models.ForeignKey(
        'clinic.Patient', null=True, blank=True, on_delete=models.SET_NULL,
        related_name='medicine_bills', verbose_name=_('patient'),
    )
    discount_percent = models.DecimalField(
        _('discount %'), max_digits=5, decimal_places=2, default=0,
    )
    total_amount = models.DecimalField(_('total amount'), max_digits=12, decimal_places=2)
    total_received_amount = models.DecimalField(
        _('total received'), max_digits=12, decimal_places=2, default=0,
    )

    class Meta:
        verbose_name = _('medicine bill')
        verbose_name_plural = _('medicine bills')
        ordering = ['-bill_date']
        indexes = [
            models.Index(fields=['franchise', 'bill_date']),
        ]

    def __str__(self):
        return self.bill_number

    def save(self, *args, **kwargs):
        if not self.bill_number:
            self.bill_number = next_number(
                MedicineBill, 'bill_number', NUMBER_PREFIX_MEDICINE_BILL, on=self.bill_date,
            )
        super().save(*args, **kwargs)


class MedicineBillDetail(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    bill = models.ForeignKey(
        MedicineBill, on_delete=models.CASCADE,
        related_name='details', verbose_name=_('bill'),
    )
    medicine = models.ForeignKey(
        'medicines.Medicine', on_delete=models.PROTECT,
        related_name='+', verbose_name=_('medicine'),
    )
    qty = models.PositiveIntegerField(_('quantity'))
    mrp = models.DecimalField(_('MRP'), max_digits=10, decimal_places=2)
    amount = models.DecimalField(_('amount'), max_digits=12, decimal_places=2)

    class Meta:
        verbose_name = _('medicine bill detail')
        verbose_name_plural = _('medicine bill details')

    def __str__(self):
        return f'{self.medicine_id} x{self.qty}'


class MedicineBillReceipt(ReceiptBase):
    bill = models.ForeignKey(
        MedicineBill, on_delete=models.CASCADE,
        related_name='receipts', verbose_name=_('bill'),
    )

    class Meta(ReceiptBase.Meta):
        verbose_name = _('medicine bill receipt')
        verbose_name_plural = _('medicine bill receipts')

    def save(self, *args, **kwargs):
        if not self.receipt_number:
            self.receipt_number = next_number(
                MedicineBillReceipt, 'receipt_number', NUMBER_PREFIX_MEDICINE_BILL_RECEIPT, on=self.date,
            )
        super().save(*args, **kwargs)
