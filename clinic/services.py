"""
Clinic — Service Layer

Consultation orchestration: service lines, dispensed medicines drawn
FEFO from the appointment's franchise, and an optional receipt, all in
one atomic unit of work.

@file clinic/services.py
"""

import logging

from django.core.exceptions import PermissionDenied
from django.db import transaction

from core.exceptions import BusinessRuleViolation, InvalidReferenceError, ResourceNotFoundError
from core.receipts import post_receipt
from core.totals import discounted_total, line_amount, money
from inventory.allocation import BatchPool, plan_lines
from inventory.models import StockTransaction
from inventory.services import LedgerService
from medicines.services import MedicineCatalog
from users.services import FranchiseResolver

from .models import (
    Appointment,
    Consultation,
    ConsultationDetail,
    ConsultationMedicine,
    ConsultationReceipt,
    Service,
)

logger = logging.getLogger('clinicstock')


class ConsultationService:

    @staticmethod
    def _price_details(details: list[dict]) -> list[tuple]:
        service_ids = {str(d['service']) for d in details if d.get('service')}
        services = {
            str(s.pk): s
            for s in Service.objects.filter(pk__in=service_ids, is_deleted=False)
        }
        missing = service_ids - set(services)
        if missing:
            raise InvalidReferenceError(detail=f'Service {sorted(missing)[0]} not found.')

        priced = []
        for d in details:
            service = services.get(str(d['service'])) if d.get('service') else None
            rate = d.get('rate')
            if rate is None:
                if service is None:
                    raise BusinessRuleViolation(detail='Each service line needs a service or a rate.')
                rate = service.rate
            rate = money(rate)
            amount = line_amount(rate, d['qty'], d.get('amount'), label='Service line amount')
            priced.append((service, d.get('description', ''), d['qty'], rate, amount))
        return priced

    @staticmethod
    def _price_medicines(medicines: list[dict]) -> tuple[dict, list[tuple]]:
        if not medicines:
            return {}, []
        catalog = MedicineCatalog.get_many(m['medicine'] for m in medicines)
        priced = []
        for m in medicines:
            info = catalog[str(m['medicine'])]
            mrp = money(m['mrp'] if m.get('mrp') is not None else info.mrp)
            amount = line_amount(mrp, m['qty'], m.get('amount'), label=f'Amount for {info.name}')
            priced.append((info, m['qty'], mrp, amount, m.get('doses', '')))
        return catalog, priced

    @classmethod
    @transaction.atomic
    def create_consultation(
        cls,
        *,
        appointment_id,
        consultation_details: list[dict] | None = None,
        consultation_medicines: list[dict] | None = None,
        total_amount=None,
        receipt: dict | None = None,
        actor=None,
        **fields,
    ) -> Consultation:
        """
        Requirements are summed per medicine and checked once each before
        any line is allocated. Without medicines the stock engine is not
        touched at all.
        """
        appointment = (
            Appointment.objects.select_related('patient', 'franchise')
            .filter(pk=appointment_id).first()
        )
        if appointment is None:
            raise InvalidReferenceError(detail='Appointment not found.')
        if actor is not None and not FranchiseResolver.can_access_franchise(actor, appointment.franchise_id):
            raise PermissionDenied('Appointment belongs to another franchise.')

        details = cls._price_details(consultation_details or [])
        _, medicines = cls._price_medicines(consultation_medicines or [])

        subtotal = sum(d[4] for d in details) + sum(m[3] for m in medicines)
        computed = discounted_total(subtotal, 0, total_amount)

        plans = []
        if medicines:
            pool = BatchPool(appointment.franchise_id)
            plans = plan_lines(
                pool,
                [(info.id, qty) for info, qty, *_ in medicines],
                names={str(info.id): info.name for info, *_ in medicines},
            )

        consultation = Consultation.objects.create(
            appointment=appointment,
            total_amount=computed,
            created_by=actor,
            **fields,
        )
        ConsultationDetail.objects.bulk_create([
            ConsultationDetail(
                consultation=consultation, service=service, description=description or '',
                qty=qty, rate=rate, amount=amount,
            )
            for service, description, qty, rate, amount in details
        ])
        ConsultationMedicine.objects.bulk_create([
            ConsultationMedicine(
                consultation=consultation, medicine_id=info.id,
                qty=qty, mrp=mrp, amount=amount, doses=doses or '',
            )
            for info, qty, mrp, amount, doses in medicines
        ])

        if medicines:
            txn = LedgerService.open_transaction(
                txn_type=StockTransaction.TxnType.CONSULTATION_DISPENSE,
                franchise_id=appointment.franchise_id,
                actor=actor,
                reference=consultation,
            )
            line_count = 0
            for (info, *_), plan in zip(medicines, plans):
                line_count += len(LedgerService.apply_allocation(txn, plan, info.rate))
            LedgerService.log_posting(
                txn, actor=actor, line_count=line_count,
                extra={'consultation_id': str(consultation.pk)},
            )

        if receipt:
            post_receipt(consultation, ConsultationReceipt, 'consultation', receipt, actor=actor)

        logger.info(
            'Consultation %s created for appointment %s (%d services, %d medicines).',
            consultation.pk, appointment.pk, len(details), len(medicines),
        )
        return consultation

    @staticmethod
    @transaction.atomic
    def add_receipt(*, consultation_id, receipt: dict, actor=None) -> ConsultationReceipt:
        consultation = Consultation.objects.select_for_update().filter(pk=consultation_id).first()
        if consultation is None:
            raise ResourceNotFoundError(detail='Consultation not found.')
        return post_receipt(consultation, ConsultationReceipt, 'consultation', receipt, actor=actor)
