"""
Medicines — Service Layer

Catalogue lookups used by the billing orchestrators, plus create/update
of catalogue entries.

@file medicines/services.py
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction

from core.constants import AUDIT_ACTION_UPDATE
from core.exceptions import InvalidReferenceError, ResourceNotFoundError
from core.services import AuditService

from .models import Medicine

logger = logging.getLogger('clinicstock')


@dataclass(frozen=True)
class MedicineInfo:
    """Read-only view of a catalogue entry as the stock engine needs it."""

    id: object
    name: str
    rate: Decimal
    mrp: Decimal
    brand: str | None


class MedicineCatalog:
    """Lookup of {id, name, rate, mrp, brand} for billing flows."""

    @staticmethod
    def _to_info(medicine: Medicine) -> MedicineInfo:
        return MedicineInfo(
            id=medicine.pk,
            name=medicine.name,
            rate=medicine.rate,
            mrp=medicine.mrp,
            brand=medicine.brand.name if medicine.brand_id else None,
        )

    @classmethod
    def get(cls, medicine_id) -> MedicineInfo:
        try:
            medicine = Medicine.objects.select_related('brand').get(
                pk=medicine_id, is_deleted=False,
            )
        except (Medicine.DoesNotExist, ValueError, ValidationError):
            raise InvalidReferenceError(detail=f'Medicine {medicine_id} not found.')
        return cls._to_info(medicine)

    @classmethod
    def get_many(cls, medicine_ids) -> dict:
        """
        Fetch several medicines at once, keyed by id.
        Raises InvalidReferenceError naming the first unknown id.
        """
        wanted = {str(mid) for mid in medicine_ids}
        try:
            rows = list(
                Medicine.objects.select_related('brand')
                .filter(pk__in=wanted, is_deleted=False)
            )
        except (ValueError, ValidationError):
            raise InvalidReferenceError(detail='Invalid medicine id in request.')
        found = {str(m.pk): cls._to_info(m) for m in rows}
        missing = sorted(wanted - set(found))
        if missing:
            raise InvalidReferenceError(detail=f'Medicine {missing[0]} not found.')
        return found


class MedicineService:
    """Catalogue management."""

    @staticmethod
    @transaction.atomic
    def create_medicine(*, actor=None, **fields) -> Medicine:
        medicine = Medicine(**fields)
        medicine.full_clean()
        medicine.created_by = actor
        medicine._current_user = actor
        medicine.save()
        return medicine

    @staticmethod
    @transaction.atomic
    def update_medicine(*, medicine_id, actor=None, **fields) -> Medicine:
        try:
            medicine = Medicine.objects.select_for_update().get(
                pk=medicine_id, is_deleted=False,
            )
        except Medicine.DoesNotExist:
            raise ResourceNotFoundError()

        old_rate = medicine.rate
        for field, value in fields.items():
            if hasattr(medicine, field) and field not in ('id', 'pk'):
                setattr(medicine, field, value)

        medicine.updated_by = actor
        medicine._current_user = actor
        medicine.full_clean()
        medicine.save()

        if old_rate != medicine.rate:
            logger.info(
                'Medicine %s rate changed %s -> %s by %s.',
                medicine.pk, old_rate, medicine.rate, actor,
            )
        return medicine

    @staticmethod
    @transaction.atomic
    def deactivate_medicine(*, medicine_id, actor=None) -> Medicine:
        try:
            medicine = Medicine.objects.select_for_update().get(
                pk=medicine_id, is_deleted=False,
            )
        except Medicine.DoesNotExist:
            raise ResourceNotFoundError()

        medicine.is_active = False
        medicine.updated_by = actor
        medicine.save(update_fields=['is_active', 'updated_by', 'updated_at'])
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_UPDATE,
            model_name='Medicine',
            object_id=str(medicine.pk),
            old_values={'is_active': True},
            new_values={'is_active': False},
        )
        return medicine
