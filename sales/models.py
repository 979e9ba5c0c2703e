"""
Sales — Models

Head-office sales to franchises and the transports that carry them. A
sale's stock reaches the franchise only when a transport is delivered;
until then it sits in the admin pool.

@file sales/models.py
"""

import uuid

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.constants import NUMBER_PREFIX_SALE
from core.models import BaseModel, TimestampMixin
from core.numbering import next_number


class Sale(BaseModel):
    invoice_no = models.CharField(_('invoice number'), max_length=32, unique=True, editable=False)
    invoice_date = models.DateTimeField(_('invoice date'), default=timezone.now, db_index=True)
    franchise = models.ForeignKey(
        'franchises.Franchise', on_delete=models.PROTECT,
        related_name='sales', verbose_name=_('franchise'),
    )
    discount_percent = models.DecimalField(_('discount %'), max_digits=5, decimal_places=2, default=0)
    total_amount = models.DecimalField(_('total amount'), max_digits=12, decimal_places=2, default=0)
    notes = models.TextField(_('notes'), blank=True)

    class Meta:
        verbose_name = _('sale')
        verbose_name_plural = _('sales')
        ordering = ['-invoice_date']

    def __str__(self):
        return self.invoice_no

    def save(self, *args, **kwargs):
        if not self.invoice_no:
            self.invoice_no = next_number(Sale, 'invoice_no', NUMBER_PREFIX_SALE, on=self.invoice_date)
        super().save(*args, **kwargs)


class SaleDetail(models.Model):
    """One batch of one medicine sold to the franchise."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    sale = models.ForeignKey(
        Sale, on_delete=models.CASCADE,
        related_name='details', verbose_name=_('sale'),
    )
    medicine = models.ForeignKey(
        'medicines.Medicine', on_delete=models.PROTECT,
        related_name='+', verbose_name=_('medicine'),
    )
    batch_number = models.CharField(_('batch number'), max_length=100)
    expiry_date = models.DateField(_('expiry date'))
    quantity = models.PositiveIntegerField(_('quantity'))
    rate = models.DecimalField(_('rate'), max_digits=10, decimal_places=2)
    amount = models.DecimalField(_('amount'), max_digits=12, decimal_places=2)

    class Meta:
        verbose_name = _('sale detail')
        verbose_name_plural = _('sale details')
        ordering = ['expiry_date', 'id']


class Transport(TimestampMixin):

    class Status(models.TextChoices):
        PENDING = 'PENDING', _('Pending')
        DISPATCHED = 'DISPATCHED', _('Dispatched')
        DELIVERED = 'DELIVERED', _('Delivered')

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    sale = models.ForeignKey(
        Sale, on_delete=models.CASCADE,
        related_name='transports', verbose_name=_('sale'),
    )
    franchise = models.ForeignKey(
        'franchises.Franchise', on_delete=models.PROTECT,
        related_name='transports', verbose_name=_('franchise'),
    )
    status = models.CharField(
        _('status'), max_length=16, choices=Status.choices,
        default=Status.PENDING, db_index=True,
    )
    dispatched_quantity = models.PositiveIntegerField(_('dispatched quantity'), default=0)
    transporter_name = models.CharField(_('transporter'), max_length=255, blank=True)
    company_name = models.CharField(_('company'), max_length=255, blank=True)
    transport_fee = models.DecimalField(
        _('transport fee'), max_digits=10, decimal_places=2, null=True, blank=True,
    )
    receipt_number = models.CharField(_('receipt number'), max_length=100, blank=True)
    vehicle_number = models.CharField(_('vehicle number'), max_length=50, blank=True)
    tracking_number = models.CharField(_('tracking number'), max_length=100, blank=True)
    notes = models.TextField(_('notes'), blank=True)
    dispatched_at = models.DateTimeField(_('dispatched at'), null=True, blank=True)
    delivered_at = models.DateTimeField(_('delivered at'), null=True, blank=True)
    stock_posted_at = models.DateTimeField(
        _('stock posted at'), null=True, blank=True,
        help_text=_('Set once the delivered quantities are booked into franchise stock'),
    )

    class Meta:
        verbose_name = _('transport')
        verbose_name_plural = _('transports')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['sale', 'status']),
        ]

    def __str__(self):
        return f'{self.sale_id} [{self.status}]'


class TransportDetail(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    transport = models.ForeignKey(
        Transport, on_delete=models.CASCADE,
        related_name='details', verbose_name=_('transport'),
    )
    sale_detail = models.ForeignKey(
        SaleDetail, on_delete=models.CASCADE,
        related_name='transport_details', verbose_name=_('sale detail'),
    )
    quantity = models.PositiveIntegerField(_('quantity'))

    class Meta:
        verbose_name = _('transport detail')
        verbose_name_plural = _('transport details')
        constraints = [
            models.UniqueConstraint(
                fields=['transport', 'sale_detail'],
                name='unique_transport_sale_detail',
            ),
        ]
