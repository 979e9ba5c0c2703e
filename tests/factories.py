"""
ClinicStock — Test Factories

Factory Boy factories for generating test data, plus small helpers that
seed stock rows the way a delivery would. Used across all test modules.

@file tests/factories.py
"""

import uuid
from datetime import timedelta
from decimal import Decimal

import factory
from django.utils import timezone

from clinic.models import Appointment, Patient, Service
from core.models import AuditLog
from franchises.models import Franchise
from inventory.models import (
    AdminStockBalance,
    AdminStockBatchBalance,
    StockBalance,
    StockBatchBalance,
)
from medicines.models import Brand, Medicine
from sales.models import Sale, SaleDetail, Transport
from users.models import User


# ---------------------------------------------------------------------------
# Franchises & users
# ---------------------------------------------------------------------------

class FranchiseFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Franchise

    name = factory.Sequence(lambda n: f'Franchise-{n}')
    code = factory.Sequence(lambda n: f'FR{n:03d}')
    contact_person = factory.Faker('name')
    phone = factory.Sequence(lambda n: f'98{n:08d}')
    is_active = True


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User
        skip_postgeneration_save = True

    phone = factory.Sequence(lambda n: f'+9199{n:08d}')
    email = factory.LazyAttribute(lambda o: f'user-{o.phone[-8:]}@test.in')
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    role = User.RoleChoices.FRANCHISE
    franchise = factory.SubFactory(FranchiseFactory)
    status = User.StatusChoices.ACTIVE
    is_active = True

    @factory.post_generation
    def password(self, create, extracted, **kwargs):
        password = extracted or 'TestPass2026!'
        self.set_password(password)
        if create:
            self.save(update_fields=['password'])


class AdminUserFactory(UserFactory):
    role = User.RoleChoices.ADMIN
    franchise = None
    is_staff = True


class SuperuserFactory(AdminUserFactory):
    is_superuser = True


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------

class BrandFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Brand

    name = factory.Sequence(lambda n: f'Brand-{n}')


class MedicineFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Medicine

    name = factory.Sequence(lambda n: f'Medicine-{n}')
    brand = factory.SubFactory(BrandFactory)
    rate = factory.LazyFunction(lambda: Decimal('8.00'))
    mrp = factory.LazyFunction(lambda: Decimal('10.00'))
    is_active = True


# ---------------------------------------------------------------------------
# Clinic
# ---------------------------------------------------------------------------

class PatientFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Patient

    franchise = factory.SubFactory(FranchiseFactory)
    name = factory.Faker('name')
    gender = Patient.GenderChoices.FEMALE
    age = 34
    mobile = factory.Sequence(lambda n: f'97{n:08d}')


class ServiceFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Service

    name = factory.Sequence(lambda n: f'Service-{n}')
    rate = factory.LazyFunction(lambda: Decimal('200.00'))


class AppointmentFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Appointment

    franchise = factory.SubFactory(FranchiseFactory)
    patient = factory.SubFactory(PatientFactory, franchise=factory.SelfAttribute('..franchise'))
    appointment_at = factory.LazyFunction(timezone.now)
    visit_purpose = 'Fever'


# ---------------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------------

def days_from_now(days: int):
    return timezone.localdate() + timedelta(days=days)


class StockBatchBalanceFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = StockBatchBalance

    franchise = factory.SubFactory(FranchiseFactory)
    medicine = factory.SubFactory(MedicineFactory)
    batch_number = factory.Sequence(lambda n: f'B{n:05d}')
    expiry_date = factory.LazyFunction(lambda: days_from_now(365))
    quantity = 10


def seed_batches(franchise, medicine, batches):
    """
    Create batch rows from ``[(batch_number, days_to_expiry, qty), ...]``
    and the matching aggregate row. Returns the batch rows in input order.
    """
    rows = [
        StockBatchBalance.objects.create(
            franchise=franchise,
            medicine=medicine,
            batch_number=batch_number,
            expiry_date=days_from_now(days),
            quantity=qty,
        )
        for batch_number, days, qty in batches
    ]
    StockBalance.objects.update_or_create(
        franchise=franchise, medicine=medicine,
        defaults={'quantity': sum(qty for _, _, qty in batches)},
    )
    return rows


def seed_admin_stock(medicine, quantity, *, batch_number=None, days_to_expiry=365):
    if batch_number:
        AdminStockBatchBalance.objects.create(
            medicine=medicine,
            batch_number=batch_number,
            expiry_date=days_from_now(days_to_expiry),
            quantity=quantity,
        )
    row, _ = AdminStockBalance.objects.update_or_create(
        medicine=medicine, defaults={'quantity': quantity},
    )
    return row


# ---------------------------------------------------------------------------
# Sales
# ---------------------------------------------------------------------------

class SaleFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Sale

    franchise = factory.SubFactory(FranchiseFactory)
    total_amount = factory.LazyFunction(lambda: Decimal('0.00'))


class SaleDetailFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = SaleDetail

    sale = factory.SubFactory(SaleFactory)
    medicine = factory.SubFactory(MedicineFactory)
    batch_number = factory.Sequence(lambda n: f'SB{n:05d}')
    expiry_date = factory.LazyFunction(lambda: days_from_now(365))
    quantity = 10
    rate = factory.LazyFunction(lambda: Decimal('8.00'))
    amount = factory.LazyAttribute(lambda o: o.rate * o.quantity)


class TransportFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Transport

    sale = factory.SubFactory(SaleFactory)
    franchise = factory.SelfAttribute('sale.franchise')
    status = Transport.Status.PENDING


# ---------------------------------------------------------------------------
# Audit
# ---------------------------------------------------------------------------

class AuditLogFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = AuditLog

    actor = factory.SubFactory(UserFactory)
    action = AuditLog.ActionChoices.CREATE
    model_name = 'Medicine'
    object_id = factory.LazyFunction(lambda: str(uuid.uuid4()))
