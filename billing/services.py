"""
Billing — Service Layer

Medicine bill orchestration. A bill is validated, planned against the
franchise's batches, then persisted with its ledger postings in one
atomic unit of work. Any failure rolls everything back.

@file billing/services.py
"""

import logging

from django.db import transaction
from django.utils import timezone

from core.constants import AUDIT_ACTION_DELETE
from core.exceptions import BusinessRuleViolation, InvalidReferenceError, ResourceNotFoundError
from core.receipts import post_receipt
from core.services import AuditService
from core.totals import discounted_total, line_amount, money
from clinic.models import Patient
from inventory.allocation import BatchPool, plan_lines
from inventory.models import StockTransaction
from inventory.services import LedgerService
from medicines.services import MedicineCatalog

from .models import MedicineBill, MedicineBillDetail, MedicineBillReceipt

logger = logging.getLogger('clinicstock')


class MedicineBillService:

    @staticmethod
    @transaction.atomic
    def create_bill(
        *,
        franchise_id,
        details: list[dict],
        discount_percent=0,
        total_amount=None,
        patient_id=None,
        bill_date=None,
        receipt: dict | None = None,
        actor=None,
    ) -> MedicineBill:
        """
        ``details`` items: {medicine, qty, mrp?, amount?}. ``mrp`` defaults
        to the catalogue MRP; submitted amounts must match the recomputed
        ones. Ledger lines are valued at the medicine's standing rate.
        """
        if not details:
            raise BusinessRuleViolation(detail='At least one medicine line is required.')

        patient = None
        if patient_id is not None:
            patient = Patient.objects.filter(pk=patient_id, is_deleted=False).first()
            if patient is None:
                raise InvalidReferenceError(detail='Patient not found.')

        catalog = MedicineCatalog.get_many(d['medicine'] for d in details)

        priced = []
        for d in details:
            info = catalog[str(d['medicine'])]
            mrp = money(d['mrp'] if d.get('mrp') is not None else info.mrp)
            amount = line_amount(mrp, d['qty'], d.get('amount'), label=f'Amount for {info.name}')
            priced.append((info, d['qty'], mrp, amount))
        total = discounted_total(sum(p[3] for p in priced), discount_percent, total_amount)

        pool = BatchPool(franchise_id)
        plans = plan_lines(
            pool,
            [(info.id, qty) for info, qty, _, _ in priced],
            names={str(info.id): info.name for info, *_ in priced},
        )

        bill = MedicineBill.objects.create(
            franchise_id=franchise_id,
            patient=patient,
            bill_date=bill_date or timezone.now(),
            discount_percent=discount_percent or 0,
            total_amount=total,
            created_by=actor,
        )
        MedicineBillDetail.objects.bulk_create([
            MedicineBillDetail(bill=bill, medicine_id=info.id, qty=qty, mrp=mrp, amount=amount)
            for info, qty, mrp, amount in priced
        ])

        txn = LedgerService.open_transaction(
            txn_type=StockTransaction.TxnType.FRANCHISE_TO_PATIENT_SALE,
            franchise_id=franchise_id,
            actor=actor,
            reference=bill,
            txn_date=bill.bill_date,
        )
        line_count = 0
        for (info, *_), plan in zip(priced, plans):
            line_count += len(LedgerService.apply_allocation(txn, plan, info.rate))

        if receipt:
            post_receipt(bill, MedicineBillReceipt, 'bill', receipt, actor=actor)

        LedgerService.log_posting(txn, actor=actor, line_count=line_count, extra={'bill_number': bill.bill_number})
        return bill

    @staticmethod
    @transaction.atomic
    def add_receipt(*, bill_id, receipt: dict, actor=None) -> MedicineBillReceipt:
        bill = MedicineBill.objects.select_for_update().filter(pk=bill_id).first()
        if bill is None:
            raise ResourceNotFoundError(detail='Medicine bill not found.')
        return post_receipt(bill, MedicineBillReceipt, 'bill', receipt, actor=actor)

    @staticmethod
    @transaction.atomic
    def delete_bill(*, bill_id, actor=None) -> None:
        """Put the dispensed quantities back into their batches, then delete."""
        bill = MedicineBill.objects.select_for_update().filter(pk=bill_id).first()
        if bill is None:
            raise ResourceNotFoundError(detail='Medicine bill not found.')

        txn = LedgerService.transaction_for(bill)
        if txn is not None:
            LedgerService.reverse_transaction(txn, actor=actor)
            txn.delete()

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_DELETE,
            model_name='MedicineBill',
            object_id=str(bill.pk),
            old_values={
                'bill_number': bill.bill_number,
                'franchise_id': str(bill.franchise_id),
                'total_amount': str(bill.total_amount),
            },
        )
        logger.info('Medicine bill %s deleted by %s.', bill.bill_number, actor)
        bill.delete()
