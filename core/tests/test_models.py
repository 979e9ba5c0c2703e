"""
Core — Model Tests

Tests for AuditLog, document numbering and the base model mixins.

@file core/tests/test_models.py
"""

from datetime import date

import pytest

from core.models import AuditLog
from core.numbering import format_number, next_number
from core.services import AuditService
from medicines.models import Medicine
from sales.models import Sale
from tests.factories import AuditLogFactory, FranchiseFactory, MedicineFactory, UserFactory


@pytest.mark.django_db
class TestAuditLog:
    def test_create_audit_log(self):
        user = UserFactory()
        log = AuditService.log(
            actor=user,
            action=AuditLog.ActionChoices.CREATE,
            model_name='Medicine',
            object_id='test-123',
            new_values={'key': 'value'},
        )
        assert log.pk is not None
        assert log.action == 'CREATE'
        assert log.model_name == 'Medicine'

    def test_audit_log_via_factory(self):
        log = AuditLogFactory()
        assert log.pk is not None

    def test_snapshot_serialises_decimals(self):
        medicine = MedicineFactory()
        snapshot = AuditService.snapshot(medicine)
        assert snapshot['rate'] == '8.00'
        assert snapshot['name'] == medicine.name

    def test_medicine_create_triggers_audit(self):
        before = AuditLog.objects.filter(model_name='Medicine').count()
        MedicineFactory()
        assert AuditLog.objects.filter(model_name='Medicine').count() == before + 1


@pytest.mark.django_db
class TestSoftDelete:
    def test_soft_delete_keeps_row(self):
        medicine = MedicineFactory()
        medicine.soft_delete()
        medicine.refresh_from_db()
        assert medicine.is_deleted is True
        assert medicine.deleted_at is not None
        assert Medicine.objects.filter(pk=medicine.pk).exists()

    def test_restore(self):
        medicine = MedicineFactory()
        medicine.soft_delete()
        medicine.restore()
        medicine.refresh_from_db()
        assert medicine.is_deleted is False


class TestFormatNumber:
    def test_format(self):
        assert format_number('ST', date(2026, 3, 7), 12) == 'ST-07032026-0012'


@pytest.mark.django_db
class TestNextNumber:
    def test_first_number_of_the_day(self):
        assert next_number(Sale, 'invoice_no', 'S', on=date(2026, 1, 2)) == 'S-02012026-0001'

    def test_sequence_continues_from_highest(self):
        franchise = FranchiseFactory()
        Sale.objects.create(franchise=franchise, invoice_no='S-02012026-0007')
        assert next_number(Sale, 'invoice_no', 'S', on=date(2026, 1, 2)) == 'S-02012026-0008'

    def test_sequence_is_per_day(self):
        franchise = FranchiseFactory()
        Sale.objects.create(franchise=franchise, invoice_no='S-02012026-0007')
        assert next_number(Sale, 'invoice_no', 'S', on=date(2026, 1, 3)) == 'S-03012026-0001'

    def test_auto_assigned_on_save(self):
        sale = Sale.objects.create(franchise=FranchiseFactory())
        assert sale.invoice_no.startswith('S-')
        assert sale.invoice_no.endswith('-0001')
