"""
Core — Base Models & Audit Infrastructure

Reusable abstract models (timestamps, soft-delete, actor fields) and the
AuditLog model recording every stock posting and status change across
the clinic network.

@file core/models.py
"""

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


# ---------------------------------------------------------------------------
# Abstract base models (mixins)
# ---------------------------------------------------------------------------

class TimestampMixin(models.Model):
    """Adds created_at / updated_at to any model."""

    created_at = models.DateTimeField(
        _('created at'), auto_now_add=True, db_index=True,
    )
    updated_at = models.DateTimeField(
        _('updated at'), auto_now=True,
    )

    class Meta:
        abstract = True


class AuditFieldsMixin(models.Model):
    """Adds created_by / updated_by foreign keys for actor tracking."""

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='+',
        verbose_name=_('created by'),
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='+',
        verbose_name=_('updated by'),
    )

    class Meta:
        abstract = True


class SoftDeleteMixin(models.Model):
    """
    Soft-delete for master data (franchises, medicines, patients).
    Rows referenced by the stock ledger are never physically removed.
    """

    is_deleted = models.BooleanField(_('deleted'), default=False, db_index=True)
    deleted_at = models.DateTimeField(_('deleted at'), null=True, blank=True)
    deleted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='+',
        verbose_name=_('deleted by'),
    )

    class Meta:
        abstract = True

    def soft_delete(self, user=None):
        self.is_deleted = True
        self.deleted_at = timezone.now()
        self.deleted_by = user
        self.save(update_fields=['is_deleted', 'deleted_at', 'deleted_by', 'updated_at'])

    def restore(self, user=None):
        self.is_deleted = False
        self.deleted_at = None
        self.deleted_by = None
        self.save(update_fields=['is_deleted', 'deleted_at', 'deleted_by', 'updated_at'])


class BaseModel(TimestampMixin, AuditFieldsMixin):
    """
    Standard base for all ClinicStock models.
    UUID PK + timestamps + actor audit fields.
    """

    id = models.UUIDField(
        primary_key=True, default=uuid.uuid4, editable=False,
    )

    class Meta:
        abstract = True


class RegulatedModel(BaseModel, SoftDeleteMixin):
    """Base for master-data models that must never be hard-deleted."""

    class Meta:
        abstract = True


# ---------------------------------------------------------------------------
# Audit Log
# ---------------------------------------------------------------------------

class AuditLog(models.Model):
    """
    Immutable audit trail. One row per create / update / status change /
    stock posting across the platform.

    Stores old and new values as JSON for full diff capability.
    """

    class ActionChoices(models.TextChoices):
        CREATE = 'CREATE', _('Create')
        UPDATE = 'UPDATE', _('Update')
        DELETE = 'DELETE', _('Delete')
        STATUS_CHANGE = 'STATUS_CHANGE', _('Status Change')
        STOCK_POSTING = 'STOCK_POSTING', _('Stock Posting')
        STOCK_REVERSAL = 'STOCK_REVERSAL', _('Stock Reversal')

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='audit_logs',
        verbose_name=_('actor'),
    )
    action = models.CharField(
        _('action'), max_length=20,
        choices=ActionChoices.choices, db_index=True,
    )
    model_name = models.CharField(_('model'), max_length=100, db_index=True)
    object_id = models.CharField(_('object ID'), max_length=40, db_index=True)

    old_values = models.JSONField(_('old values'), null=True, blank=True)
    new_values = models.JSONField(_('new values'), null=True, blank=True)

    timestamp = models.DateTimeField(_('timestamp'), auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = _('audit log')
        verbose_name_plural = _('audit logs')
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['model_name', 'object_id']),
            models.Index(fields=['actor', 'timestamp']),
            models.Index(fields=['action', 'timestamp']),
        ]

    def __str__(self):
        return f'{self.action} {self.model_name}:{self.object_id} by {self.actor_id}'


class ReceiptBase(BaseModel):
    """
    Payment received against a bill or consultation. Concrete receipts add
    the FK to what they settle and a numbered ``receipt_number``.
    """

    class PaymentMode(models.TextChoices):
        CASH = 'CASH', _('Cash')
        UPI = 'UPI', _('UPI')
        CARD = 'CARD', _('Card')
        BANK = 'BANK', _('Bank transfer')
        CHEQUE = 'CHEQUE', _('Cheque')

    receipt_number = models.CharField(_('receipt number'), max_length=32, unique=True, editable=False)
    date = models.DateTimeField(_('date'), default=timezone.now)
    payment_mode = models.CharField(_('payment mode'), max_length=10, choices=PaymentMode.choices)
    amount = models.DecimalField(_('amount'), max_digits=12, decimal_places=2)
    payer_name = models.CharField(_('payer name'), max_length=255, blank=True)
    contact_number = models.CharField(_('contact number'), max_length=20, blank=True)
    upi_name = models.CharField(_('UPI name'), max_length=255, blank=True)
    utr_number = models.CharField(_('UTR number'), max_length=100, blank=True)
    bank_name = models.CharField(_('bank name'), max_length=255, blank=True)
    cheque_number = models.CharField(_('cheque number'), max_length=50, blank=True)
    cheque_date = models.DateField(_('cheque date'), null=True, blank=True)
    notes = models.TextField(_('notes'), blank=True)

    class Meta:
        abstract = True
        ordering = ['-date']

    def __str__(self):
        return self.receipt_number
