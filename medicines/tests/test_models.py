"""
Medicines — Model Tests

@file medicines/tests/test_models.py
"""

from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError

from medicines.models import Brand
from tests.factories import BrandFactory, MedicineFactory


@pytest.mark.django_db
class TestMedicine:
    def test_str_with_brand(self):
        medicine = MedicineFactory(name='Amoxicillin', brand=BrandFactory(name='Cipla'))
        assert str(medicine) == 'Amoxicillin (Cipla)'

    def test_str_without_brand(self):
        assert str(MedicineFactory(name='ORS', brand=None)) == 'ORS'

    def test_mrp_below_rate_rejected(self):
        medicine = MedicineFactory.build(rate=Decimal('10.00'), mrp=Decimal('9.00'), brand=None)
        with pytest.raises(ValidationError):
            medicine.full_clean()


@pytest.mark.django_db
class TestBrand:
    def test_name_unique_among_active(self):
        BrandFactory(name='Sun')
        with pytest.raises(IntegrityError):
            Brand.objects.create(name='Sun')

    def test_deleted_name_can_be_reused(self):
        old = BrandFactory(name='Sun')
        old.soft_delete()
        assert Brand.objects.create(name='Sun').pk != old.pk
