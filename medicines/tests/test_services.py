"""
Medicines — Service Layer Tests

@file medicines/tests/test_services.py
"""

import uuid
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from core.exceptions import InvalidReferenceError, ResourceNotFoundError
from medicines.services import MedicineCatalog, MedicineService
from tests.factories import AdminUserFactory, BrandFactory, MedicineFactory


@pytest.mark.django_db
class TestMedicineCatalog:
    def test_get(self):
        medicine = MedicineFactory(name='Cetirizine', brand=BrandFactory(name='Dr Reddy'))
        info = MedicineCatalog.get(medicine.pk)
        assert info.name == 'Cetirizine'
        assert info.brand == 'Dr Reddy'
        assert info.rate == Decimal('8.00')

    def test_get_unknown(self):
        with pytest.raises(InvalidReferenceError):
            MedicineCatalog.get(uuid.uuid4())

    def test_get_many_keyed_by_id(self):
        a, b = MedicineFactory(), MedicineFactory()
        found = MedicineCatalog.get_many([a.pk, b.pk, a.pk])
        assert set(found) == {str(a.pk), str(b.pk)}

    def test_get_many_names_missing_id(self):
        a = MedicineFactory()
        missing = uuid.uuid4()
        with pytest.raises(InvalidReferenceError) as exc:
            MedicineCatalog.get_many([a.pk, missing])
        assert str(missing) in str(exc.value.detail)

    def test_deleted_medicine_is_unknown(self):
        medicine = MedicineFactory()
        medicine.soft_delete()
        with pytest.raises(InvalidReferenceError):
            MedicineCatalog.get(medicine.pk)


@pytest.mark.django_db
class TestMedicineService:
    def test_create(self):
        admin = AdminUserFactory()
        medicine = MedicineService.create_medicine(
            actor=admin, name='Azithromycin', rate=Decimal('20.00'), mrp=Decimal('30.00'),
        )
        assert medicine.created_by == admin

    def test_create_rejects_mrp_below_rate(self):
        with pytest.raises(ValidationError):
            MedicineService.create_medicine(name='X', rate=Decimal('20.00'), mrp=Decimal('10.00'))

    def test_update_rate(self):
        medicine = MedicineFactory()
        updated = MedicineService.update_medicine(medicine_id=medicine.pk, rate=Decimal('9.00'))
        assert updated.rate == Decimal('9.00')

    def test_update_unknown(self):
        with pytest.raises(ResourceNotFoundError):
            MedicineService.update_medicine(medicine_id=uuid.uuid4(), rate=Decimal('1.00'))

    def test_deactivate(self):
        medicine = MedicineService.deactivate_medicine(medicine_id=MedicineFactory().pk)
        assert medicine.is_active is False
