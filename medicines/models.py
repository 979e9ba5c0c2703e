"""
Medicines — Models

Medicine catalogue shared by every franchise: brands and the medicines
sold under them, each with a standing purchase rate and an MRP.

@file medicines/models.py
"""

from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

from core.models import RegulatedModel


class Brand(RegulatedModel):
    """Manufacturer / marketing brand."""

    name = models.CharField(_('name'), max_length=255)

    class Meta:
        verbose_name = _('brand')
        verbose_name_plural = _('brands')
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['name'],
                condition=models.Q(is_deleted=False),
                name='unique_active_brand_name',
            ),
        ]

    def __str__(self):
        return self.name


class Medicine(RegulatedModel):
    """
    A medicine in the catalogue.

    ``rate`` is the standing rate used to value stock movements in the
    ledger; ``mrp`` is the maximum retail price billed to patients.
    """

    name = models.CharField(_('name'), max_length=255, db_index=True)
    brand = models.ForeignKey(
        Brand,
        null=True, blank=True,
        on_delete=models.PROTECT,
        related_name='medicines',
        verbose_name=_('brand'),
    )
    rate = models.DecimalField(_('rate'), max_digits=10, decimal_places=2)
    mrp = models.DecimalField(_('MRP'), max_digits=10, decimal_places=2)
    is_active = models.BooleanField(_('active'), default=True, db_index=True)

    class Meta:
        verbose_name = _('medicine')
        verbose_name_plural = _('medicines')
        ordering = ['name']
        indexes = [
            models.Index(fields=['is_active', 'is_deleted']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(rate__gte=0) & models.Q(mrp__gte=0),
                name='medicine_non_negative_prices',
            ),
        ]

    def __str__(self):
        if self.brand_id:
            return f'{self.name} ({self.brand.name})'
        return self.name

    def clean(self):
        super().clean()
        if self.rate is not None and self.mrp is not None and self.mrp < self.rate:
            raise ValidationError({
                'mrp': _('MRP cannot be lower than the rate.'),
            })
