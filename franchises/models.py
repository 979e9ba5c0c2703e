"""
Franchises — Models

A franchise is a clinic/pharmacy outlet that holds its own medicine stock,
bills patients, and receives deliveries from the head office.

@file franchises/models.py
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from core.models import RegulatedModel


class Franchise(RegulatedModel):
    """A franchise outlet. Stock balances and ledger lines are keyed by it."""

    name = models.CharField(_('name'), max_length=255)
    code = models.CharField(
        _('code'), max_length=20, unique=True,
        help_text=_('Short outlet code used on documents'),
    )
    contact_person = models.CharField(_('contact person'), max_length=255, blank=True)
    phone = models.CharField(_('phone'), max_length=20, blank=True)
    email = models.EmailField(_('email'), blank=True)
    address = models.CharField(_('address'), max_length=500, blank=True)
    is_active = models.BooleanField(_('active'), default=True, db_index=True)

    class Meta:
        verbose_name = _('franchise')
        verbose_name_plural = _('franchises')
        ordering = ['name']
        indexes = [
            models.Index(fields=['is_active', 'is_deleted']),
        ]

    def __str__(self):
        return f'{self.name} ({self.code})'
