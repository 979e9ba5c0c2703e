"""
Clinic — Models

Patients, billable services, appointments and the consultations held
during them. A consultation may dispense medicines from the franchise's
stock and may be paid with a receipt.

@file clinic/models.py
"""

import uuid

from django.db import models
from django.utils.translation import gettext_lazy as _

from core.constants import NUMBER_PREFIX_CONSULTATION_RECEIPT, NUMBER_PREFIX_PATIENT
from core.models import BaseModel, ReceiptBase, RegulatedModel
from core.numbering import next_number


class Patient(RegulatedModel):

    class GenderChoices(models.TextChoices):
        MALE = 'MALE', _('Male')
        FEMALE = 'FEMALE', _('Female')
        OTHER = 'OTHER', _('Other')

    patient_no = models.CharField(_('patient number'), max_length=32, unique=True, editable=False)
    franchise = models.ForeignKey(
        'franchises.Franchise', on_delete=models.PROTECT,
        related_name='patients', verbose_name=_('franchise'),
    )
    name = models.CharField(_('name'), max_length=255)
    gender = models.CharField(_('gender'), max_length=10, choices=GenderChoices.choices)
    date_of_birth = models.DateField(_('date of birth'), null=True, blank=True)
    age = models.PositiveSmallIntegerField(_('age'), null=True, blank=True)
    mobile = models.CharField(_('mobile'), max_length=20)
    email = models.EmailField(_('email'), blank=True)
    address = models.CharField(_('address'), max_length=500, blank=True)

    class Meta:
        verbose_name = _('patient')
        verbose_name_plural = _('patients')
        ordering = ['name']
        indexes = [
            models.Index(fields=['franchise', 'name']),
        ]

    def __str__(self):
        return f'{self.name} ({self.patient_no})'

    def save(self, *args, **kwargs):
        if not self.patient_no:
            self.patient_no = next_number(Patient, 'patient_no', NUMBER_PREFIX_PATIENT)
        super().save(*args, **kwargs)


class Service(RegulatedModel):
    """A billable clinical service (consultation fee, dressing, ...)."""

    name = models.CharField(_('name'), max_length=255)
    rate = models.DecimalField(_('rate'), max_digits=10, decimal_places=2)
    description = models.CharField(_('description'), max_length=500, blank=True)

    class Meta:
        verbose_name = _('service')
        verbose_name_plural = _('services')
        ordering = ['name']

    def __str__(self):
        return self.name


class Appointment(BaseModel):
    franchise = models.ForeignKey(
        'franchises.Franchise', on_delete=models.PROTECT,
        related_name='appointments', verbose_name=_('franchise'),
    )
    patient = models.ForeignKey(
        Patient, on_delete=models.PROTECT,
        related_name='appointments', verbose_name=_('patient'),
    )
    appointment_at = models.DateTimeField(_('appointment date/time'), db_index=True)
    visit_purpose = models.TextField(_('visit purpose'), blank=True)

    class Meta:
        verbose_name = _('appointment')
        verbose_name_plural = _('appointments')
        ordering = ['-appointment_at']

    def __str__(self):
        return f'{self.patient} @ {self.appointment_at:%Y-%m-%d %H:%M}'


class Consultation(BaseModel):
    appointment = models.ForeignKey(
        Appointment, on_delete=models.PROTECT,
        related_name='consultations', verbose_name=_('appointment'),
    )
    complaint = models.TextField(_('complaint'), blank=True)
    diagnosis = models.TextField(_('diagnosis'), blank=True)
    remarks = models.TextField(_('remarks'), blank=True)
    next_follow_up_date = models.DateField(_('next follow-up'), null=True, blank=True)
    total_amount = models.DecimalField(_('total amount'), max_digits=12, decimal_places=2)
    total_received_amount = models.DecimalField(
        _('total received'), max_digits=12, decimal_places=2, default=0,
    )

    class Meta:
        verbose_name = _('consultation')
        verbose_name_plural = _('consultations')
        ordering = ['-created_at']

    def __str__(self):
        return f'Consultation {self.pk} for {self.appointment.patient}'

    @property
    def franchise_id(self):
        return self.appointment.franchise_id


class ConsultationDetail(models.Model):
    """A service line billed in a consultation."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    consultation = models.ForeignKey(
        Consultation, on_delete=models.CASCADE,
        related_name='details', verbose_name=_('consultation'),
    )
    service = models.ForeignKey(
        Service, null=True, blank=True, on_delete=models.PROTECT,
        related_name='+', verbose_name=_('service'),
    )
    description = models.TextField(_('description'), blank=True)
    qty = models.PositiveIntegerField(_('quantity'))
    rate = models.DecimalField(_('rate'), max_digits=10, decimal_places=2)
    amount = models.DecimalField(_('amount'), max_digits=12, decimal_places=2)

    class Meta:
        verbose_name = _('consultation detail')
        verbose_name_plural = _('consultation details')


class ConsultationMedicine(models.Model):
    """A medicine dispensed in a consultation."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    consultation = models.ForeignKey(
        Consultation, on_delete=models.CASCADE,
        related_name='medicines', verbose_name=_('consultation'),
    )
    medicine = models.ForeignKey(
        'medicines.Medicine', on_delete=models.PROTECT,
        related_name='+', verbose_name=_('medicine'),
    )
    qty = models.PositiveIntegerField(_('quantity'))
    mrp = models.DecimalField(_('MRP'), max_digits=10, decimal_places=2)
    amount = models.DecimalField(_('amount'), max_digits=12, decimal_places=2)
    doses = models.CharField(_('doses'), max_length=255, blank=True)

    class Meta:
        verbose_name = _('consultation medicine')
        verbose_name_plural = _('consultation medicines')


class ConsultationReceipt(ReceiptBase):
    consultation = models.ForeignKey(
        Consultation, on_delete=models.CASCADE,
        related_name='receipts', verbose_name=_('consultation'),
    )

    class Meta(ReceiptBase.Meta):
        verbose_name = _('consultation receipt')
        verbose_name_plural = _('consultation receipts')

    def save(self, *args, **kwargs):
        if not self.receipt_number:
            self.receipt_number = next_number(
                ConsultationReceipt, 'receipt_number', NUMBER_PREFIX_CONSULTATION_RECEIPT, on=self.date,
            )
        super().save(*args, **kwargs)
