"""
Sales — Service Layer

Sales to franchises and their transports. Stock moves only at delivery:
the admin pool is drawn down and the delivered batches are booked into
the receiving franchise under one SALE_TO_FRANCHISE transaction per sale.
Editing or deleting a sale reverses whatever was booked for it.

@file sales/services.py
"""

import logging
from collections import defaultdict
from dataclasses import dataclass

from django.core.exceptions import PermissionDenied
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from core.constants import (
    AUDIT_ACTION_CREATE,
    AUDIT_ACTION_DELETE,
    AUDIT_ACTION_STATUS_CHANGE,
    AUDIT_ACTION_UPDATE,
)
from core.exceptions import (
    BusinessRuleViolation,
    InsufficientAdminStockError,
    InvalidReferenceError,
    ResourceNotFoundError,
    StateConflict,
)
from core.services import AuditService
from core.totals import discounted_total, line_amount, money
from franchises.models import Franchise
from inventory.admin_pool import AdminStockService
from inventory.models import StockTransaction
from inventory.services import InboundLine, LedgerService
from medicines.services import MedicineCatalog
from users.services import FranchiseResolver

from .models import Sale, SaleDetail, Transport, TransportDetail

logger = logging.getLogger('clinicstock')

LOGISTICS_FIELDS = (
    'transporter_name', 'company_name', 'transport_fee', 'receipt_number',
    'vehicle_number', 'tracking_number', 'notes',
)


@dataclass(frozen=True)
class DispatchLine:
    sale_detail: SaleDetail
    quantity: int


def _raise_shortfall(shortfall) -> None:
    info = MedicineCatalog.get(shortfall.medicine_id)
    raise InsufficientAdminStockError(
        medicine_id=shortfall.medicine_id,
        medicine_name=info.name,
        available=shortfall.available,
        required=shortfall.required,
        detail=(
            f'Insufficient admin stock for {info.name}. '
            f'Available: {shortfall.available}, Requested: {shortfall.required}'
        ),
    )


def _fefo_split(capacities, requested: int) -> list[DispatchLine]:
    """Spread ``requested`` over (detail, capacity) pairs in their given order."""
    remaining = requested
    lines = []
    for detail, capacity in capacities:
        qty = min(remaining, capacity) if remaining > 0 else 0
        remaining -= qty
        lines.append(DispatchLine(detail, qty))
    return lines


class SaleService:

    @staticmethod
    def _price_lines(lines: list[dict]) -> list[dict]:
        catalog = MedicineCatalog.get_many(line['medicine'] for line in lines)
        priced = []
        for line in lines:
            info = catalog[str(line['medicine'])]
            rate = money(line['rate'] if line.get('rate') is not None else info.rate)
            priced.append({
                'medicine_id': info.id,
                'batch_number': line['batch_number'],
                'expiry_date': line['expiry_date'],
                'quantity': line['quantity'],
                'rate': rate,
                'amount': line_amount(rate, line['quantity'], line.get('amount'), label=f'Amount for {info.name}'),
            })
        return priced

    @staticmethod
    def _check_franchise(franchise_id) -> None:
        if not Franchise.objects.filter(pk=franchise_id, is_deleted=False).exists():
            raise InvalidReferenceError(detail='Franchise not found.')

    @staticmethod
    def _replace_details(sale: Sale, priced: list[dict]) -> list[SaleDetail]:
        sale.details.all().delete()
        return SaleDetail.objects.bulk_create([SaleDetail(sale=sale, **line) for line in priced])

    @staticmethod
    def _unpost(sale: Sale, *, actor=None) -> StockTransaction | None:
        """
        Reverse the sale's booked stock on the franchise and credit the
        admin pool with the same batches. Returns the emptied header.
        """
        txn = LedgerService.transaction_for(sale)
        if txn is None:
            return None
        lines = list(txn.lines.all())
        LedgerService.reverse_transaction(txn, actor=actor)
        for line in lines:
            AdminStockService.credit(
                line.medicine_id, line.qty_change,
                batch_number=line.batch_number, expiry_date=line.expiry_date,
            )
        return txn

    @staticmethod
    def _ensure_pending_transport(sale: Sale) -> None:
        if not sale.transports.exists():
            Transport.objects.create(sale=sale, franchise_id=sale.franchise_id)

    @classmethod
    @transaction.atomic
    def create_sale(
        cls,
        *,
        franchise_id,
        sale_details: list[dict],
        discount_percent=0,
        total_amount=None,
        invoice_date=None,
        notes: str = '',
        actor=None,
    ) -> Sale:
        if not sale_details:
            raise BusinessRuleViolation(detail='At least one sale line is required.')
        cls._check_franchise(franchise_id)
        priced = cls._price_lines(sale_details)
        total = discounted_total(sum(p['amount'] for p in priced), discount_percent, total_amount)

        sale = Sale.objects.create(
            franchise_id=franchise_id,
            invoice_date=invoice_date or timezone.now(),
            discount_percent=discount_percent or 0,
            total_amount=total,
            notes=notes or '',
            created_by=actor,
        )
        cls._replace_details(sale, priced)
        cls._ensure_pending_transport(sale)

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_CREATE,
            model_name='Sale',
            object_id=str(sale.pk),
            new_values={'invoice_no': sale.invoice_no, 'franchise_id': str(franchise_id), 'total_amount': str(total)},
        )
        logger.info('Sale %s created for franchise %s.', sale.invoice_no, franchise_id)
        return sale

    @classmethod
    @transaction.atomic
    def update_sale(
        cls,
        *,
        sale_id,
        franchise_id=None,
        sale_details: list[dict] | None = None,
        discount_percent=None,
        total_amount=None,
        invoice_date=None,
        notes: str | None = None,
        actor=None,
    ) -> Sale:
        """
        A sale with a delivered transport is frozen, and its lines are frozen
        once any transport is dispatched. Stock is only booked at delivery,
        so an editable sale never has a posted transaction to reverse.
        A franchise change moves the transports that are still open.
        """
        sale = Sale.objects.select_for_update().filter(pk=sale_id).first()
        if sale is None:
            raise ResourceNotFoundError(detail='Sale not found.')
        if sale.transports.filter(status=Transport.Status.DELIVERED).exists():
            raise StateConflict(
                detail='Sale cannot be edited after delivery.',
                code='SALE_DELIVERED',
            )
        if sale_details is not None and sale.transports.filter(status=Transport.Status.DISPATCHED).exists():
            raise StateConflict(
                detail='Sale lines cannot be changed while a transport is on the road.',
                code='SALE_DISPATCHED',
            )

        old_franchise_id = sale.franchise_id
        franchise_changed = franchise_id is not None and str(franchise_id) != str(old_franchise_id)
        if franchise_changed:
            cls._check_franchise(franchise_id)
            sale.franchise_id = franchise_id

        if discount_percent is not None:
            sale.discount_percent = discount_percent
        if invoice_date is not None:
            sale.invoice_date = invoice_date
        if notes is not None:
            sale.notes = notes

        if sale_details is not None:
            if not sale_details:
                raise BusinessRuleViolation(detail='At least one sale line is required.')
            cls._replace_details(sale, cls._price_lines(sale_details))
            sale.transports.filter(status=Transport.Status.PENDING).update(dispatched_quantity=0)

        if franchise_changed:
            sale.transports.exclude(status=Transport.Status.DELIVERED).update(
                franchise_id=sale.franchise_id, updated_at=timezone.now(),
            )

        subtotal = sum(d.amount for d in sale.details.all())
        sale.total_amount = discounted_total(subtotal, sale.discount_percent, total_amount)
        sale.updated_by = actor
        sale.save()
        cls._ensure_pending_transport(sale)

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_UPDATE,
            model_name='Sale',
            object_id=str(sale.pk),
            old_values={'franchise_id': str(old_franchise_id)},
            new_values={
                'franchise_id': str(sale.franchise_id),
                'total_amount': str(sale.total_amount),
                'lines_replaced': sale_details is not None,
            },
        )
        return sale

    @classmethod
    @transaction.atomic
    def delete_sale(cls, *, sale_id, actor=None) -> None:
        sale = Sale.objects.select_for_update().filter(pk=sale_id).first()
        if sale is None:
            raise ResourceNotFoundError(detail='Sale not found.')

        txn = cls._unpost(sale, actor=actor)
        if txn is not None:
            txn.delete()

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_DELETE,
            model_name='Sale',
            object_id=str(sale.pk),
            old_values={
                'invoice_no': sale.invoice_no,
                'franchise_id': str(sale.franchise_id),
                'total_amount': str(sale.total_amount),
            },
        )
        logger.info('Sale %s deleted by %s.', sale.invoice_no, actor)
        sale.delete()


class TransportService:
    """Dispatch planning (admin) and delivery posting (franchise)."""

    @staticmethod
    def remaining_by_detail(sale: Sale) -> list[tuple[SaleDetail, int]]:
        """Sale lines with the quantity not yet on a dispatched or delivered transport."""
        used = dict(
            TransportDetail.objects.filter(
                transport__sale=sale,
                transport__status__in=[Transport.Status.DISPATCHED, Transport.Status.DELIVERED],
            )
            .values('sale_detail_id')
            .annotate(total=Sum('quantity'))
            .values_list('sale_detail_id', 'total')
        )
        return [
            (detail, max(0, detail.quantity - (used.get(detail.pk) or 0)))
            for detail in sale.details.order_by('expiry_date', 'id')
        ]

    @staticmethod
    def resolve_dispatch(
        capacities: list[tuple[SaleDetail, int]],
        *,
        dispatched_details: list[dict] | None = None,
        dispatched_quantity: int | None = None,
        exceeds_detail_code: str,
        exceeds_total_code: str,
    ) -> list[DispatchLine]:
        """
        Turn either explicit per-line quantities or a single total into
        dispatch lines bounded by ``capacities``. Zero lines are dropped.
        """
        if dispatched_details:
            payload = {}
            for item in dispatched_details:
                key = str(item['sale_detail'])
                if key in payload:
                    raise BusinessRuleViolation(detail='Duplicate sale detail provided.', code='DUPLICATE_SALE_DETAIL')
                payload[key] = item['quantity']
            known = {str(detail.pk) for detail, _ in capacities}
            if set(payload) - known:
                raise BusinessRuleViolation(detail='Invalid sale detail for dispatch.', code='INVALID_SALE_DETAIL')
            lines = []
            for detail, capacity in capacities:
                qty = payload.get(str(detail.pk), 0)
                if qty > capacity:
                    raise BusinessRuleViolation(
                        detail='Dispatched quantity exceeds the available quantity for a sale line.',
                        code=exceeds_detail_code,
                    )
                lines.append(DispatchLine(detail, qty))
        else:
            requested = dispatched_quantity or 0
            if requested > sum(capacity for _, capacity in capacities):
                raise BusinessRuleViolation(
                    detail='Dispatched quantity exceeds the sale quantity.',
                    code=exceeds_total_code,
                )
            lines = _fefo_split(capacities, requested)

        lines = [line for line in lines if line.quantity > 0]
        if not lines:
            raise BusinessRuleViolation(detail='Dispatched details are required.', code='DISPATCHED_DETAILS_REQUIRED')
        return lines

    @staticmethod
    def _set_details(transport: Transport, lines: list[DispatchLine]) -> None:
        transport.details.all().delete()
        TransportDetail.objects.bulk_create([
            TransportDetail(transport=transport, sale_detail=line.sale_detail, quantity=line.quantity)
            for line in lines
        ])
        transport.dispatched_quantity = sum(line.quantity for line in lines)

    @classmethod
    def _sync_remainder(cls, sale: Sale) -> None:
        """Keep exactly one PENDING transport for whatever is still undispatched."""
        remaining = [(d, qty) for d, qty in cls.remaining_by_detail(sale) if qty > 0]
        pending = list(sale.transports.filter(status=Transport.Status.PENDING).order_by('-created_at'))
        if not remaining:
            for transport in pending:
                transport.delete()
            return

        keep = pending[0] if pending else Transport(sale=sale, franchise_id=sale.franchise_id)
        for stale in pending[1:]:
            stale.delete()
        keep.franchise_id = sale.franchise_id
        keep.save()
        cls._set_details(keep, [DispatchLine(d, qty) for d, qty in remaining])
        keep.save(update_fields=['dispatched_quantity', 'updated_at'])

    @classmethod
    def _dispatch(cls, transport: Transport, lines: list[DispatchLine], *, actor=None) -> Transport:
        old_status = transport.status
        cls._set_details(transport, lines)
        transport.status = Transport.Status.DISPATCHED
        transport.dispatched_at = timezone.now()
        transport.save()
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_STATUS_CHANGE,
            model_name='Transport',
            object_id=str(transport.pk),
            old_values={'status': old_status},
            new_values={'status': transport.status, 'dispatched_quantity': transport.dispatched_quantity},
        )
        cls._sync_remainder(transport.sale)
        return transport

    @classmethod
    @transaction.atomic
    def create_transport(cls, *, sale_id, data: dict, actor=None) -> Transport:
        """Dispatch a sale directly, reusing its PENDING transport when there is one."""
        sale = Sale.objects.select_for_update().filter(pk=sale_id).first()
        if sale is None:
            raise ResourceNotFoundError(detail='Sale not found.')

        lines = cls.resolve_dispatch(
            cls.remaining_by_detail(sale),
            dispatched_details=data.get('dispatched_details'),
            dispatched_quantity=data.get('dispatched_quantity'),
            exceeds_detail_code='DISPATCHED_QTY_EXCEEDS_SALE_DETAIL',
            exceeds_total_code='DISPATCHED_QTY_EXCEEDS_SALE',
        )
        transport = (
            sale.transports.select_for_update()
            .filter(status=Transport.Status.PENDING)
            .order_by('-created_at').first()
        ) or Transport(sale=sale)
        transport.franchise_id = sale.franchise_id
        for field in LOGISTICS_FIELDS:
            if field in data:
                setattr(transport, field, data[field])
        transport.save()
        cls._dispatch(transport, lines, actor=actor)
        logger.info('Transport %s dispatched for sale %s by %s.', transport.pk, sale.invoice_no, actor)
        return transport

    @classmethod
    @transaction.atomic
    def admin_update(cls, *, transport_id, data: dict, actor=None) -> Transport:
        transport = (
            Transport.objects.select_for_update()
            .select_related('sale').filter(pk=transport_id).first()
        )
        if transport is None:
            raise ResourceNotFoundError(detail='Transport not found.')
        if transport.status == Transport.Status.DELIVERED:
            raise StateConflict(detail='Transport already delivered.', code='TRANSPORT_ALREADY_DELIVERED')
        if transport.status != Transport.Status.PENDING:
            raise StateConflict(detail='Only pending transports can be updated.', code='ONLY_PENDING_CAN_BE_UPDATED')

        status = data.get('status')
        if status == Transport.Status.DELIVERED:
            raise BusinessRuleViolation(
                detail='Only the receiving franchise can mark a transport delivered.',
                code='DELIVERED_BY_FRANCHISE_ONLY',
            )

        for field in LOGISTICS_FIELDS:
            if field in data:
                setattr(transport, field, data[field])
        transport.franchise_id = transport.sale.franchise_id

        lines = None
        if data.get('dispatched_details') or data.get('dispatched_quantity') is not None:
            lines = cls.resolve_dispatch(
                cls.remaining_by_detail(transport.sale),
                dispatched_details=data.get('dispatched_details'),
                dispatched_quantity=data.get('dispatched_quantity'),
                exceeds_detail_code='DISPATCHED_QTY_EXCEEDS_REMAINING',
                exceeds_total_code='DISPATCHED_QTY_EXCEEDS_REMAINING',
            )

        if status == Transport.Status.DISPATCHED:
            if lines is None:
                lines = [
                    DispatchLine(td.sale_detail, td.quantity)
                    for td in transport.details.select_related('sale_detail') if td.quantity > 0
                ]
            if not lines:
                raise BusinessRuleViolation(detail='Dispatched details are required.', code='DISPATCHED_DETAILS_REQUIRED')
            transport.save()
            cls._dispatch(transport, lines, actor=actor)
            logger.info('Transport %s dispatched by %s.', transport.pk, actor)
            return transport

        if lines is not None:
            cls._set_details(transport, lines)
        transport.save()
        return transport

    @staticmethod
    def delivered_lines(transport: Transport) -> list[DispatchLine]:
        """What physically arrived: the transport's details, else a FEFO split of the sale."""
        sale = transport.sale
        details = list(transport.details.select_related('sale_detail'))
        if details:
            lines = []
            for td in details:
                if td.sale_detail.sale_id != sale.pk:
                    raise BusinessRuleViolation(detail='Invalid transport details.', code='INVALID_TRANSPORT_DETAILS')
                if td.quantity > td.sale_detail.quantity:
                    raise BusinessRuleViolation(
                        detail='Dispatched quantity exceeds sale detail quantity.',
                        code='DISPATCHED_QTY_EXCEEDS_SALE_DETAIL',
                    )
                if td.quantity > 0:
                    lines.append(DispatchLine(td.sale_detail, td.quantity))
        else:
            capacities = [(d, d.quantity) for d in sale.details.order_by('expiry_date', 'id')]
            total = sum(qty for _, qty in capacities)
            requested = transport.dispatched_quantity or total
            if requested > total:
                raise BusinessRuleViolation(
                    detail='Dispatched quantity exceeds sale quantity.',
                    code='DISPATCHED_QTY_EXCEEDS_SALE',
                )
            lines = [line for line in _fefo_split(capacities, requested) if line.quantity > 0]

        if not lines:
            raise BusinessRuleViolation(detail='Dispatched details are required.', code='DISPATCHED_DETAILS_REQUIRED')
        return lines

    @staticmethod
    def _post_delivery(transport: Transport, lines: list[DispatchLine], *, actor=None) -> StockTransaction:
        requirements = defaultdict(int)
        for line in lines:
            requirements[line.sale_detail.medicine_id] += line.quantity

        shortfall = AdminStockService.check(requirements)
        if shortfall is not None:
            _raise_shortfall(shortfall)
        for medicine_id, qty in requirements.items():
            shortfall = AdminStockService.check_and_decrement(medicine_id, qty)
            if shortfall is not None:
                _raise_shortfall(shortfall)
        for line in lines:
            d = line.sale_detail
            AdminStockService.draw_batch(d.medicine_id, d.batch_number, d.expiry_date, line.quantity)

        sale = transport.sale
        now = timezone.now()
        txn = LedgerService.transaction_for(sale)
        if txn is None:
            txn = LedgerService.open_transaction(
                txn_type=StockTransaction.TxnType.SALE_TO_FRANCHISE,
                franchise_id=transport.franchise_id,
                actor=actor,
                reference=sale,
                txn_date=now,
            )
        else:
            txn.txn_date = now
            txn.updated_by = actor
            txn.save(update_fields=['txn_date', 'updated_by', 'updated_at'])

        entries = LedgerService.post_inbound(txn, [
            InboundLine(
                medicine_id=line.sale_detail.medicine_id,
                batch_number=line.sale_detail.batch_number,
                expiry_date=line.sale_detail.expiry_date,
                quantity=line.quantity,
                rate=line.sale_detail.rate,
            )
            for line in lines
        ])
        LedgerService.log_posting(
            txn, actor=actor, line_count=len(entries),
            extra={'transport_id': str(transport.pk), 'invoice_no': sale.invoice_no},
        )
        return txn

    @classmethod
    @transaction.atomic
    def deliver(cls, *, transport_id, actor=None) -> Transport:
        """
        DISPATCHED -> DELIVERED. Repeating the call on a delivered transport
        is a no-op; ``stock_posted_at`` guards against booking twice.
        """
        transport = (
            Transport.objects.select_for_update()
            .select_related('sale').filter(pk=transport_id).first()
        )
        if transport is None:
            raise ResourceNotFoundError(detail='Transport not found.')
        if actor is not None and not FranchiseResolver.can_access_franchise(actor, transport.franchise_id):
            raise PermissionDenied('Transport belongs to another franchise.')

        if transport.status == Transport.Status.DELIVERED:
            return transport
        if transport.status != Transport.Status.DISPATCHED:
            raise StateConflict(detail='Transport has not been dispatched.', code='NOT_DISPATCHED')

        lines = cls.delivered_lines(transport)
        now = timezone.now()
        old_status = transport.status
        transport.status = Transport.Status.DELIVERED
        transport.delivered_at = now
        if transport.stock_posted_at is None:
            cls._post_delivery(transport, lines, actor=actor)
            transport.stock_posted_at = now
        transport.save()
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_STATUS_CHANGE,
            model_name='Transport',
            object_id=str(transport.pk),
            old_values={'status': old_status},
            new_values={'status': transport.status, 'stock_posted_at': transport.stock_posted_at.isoformat()},
        )
        logger.info('Transport %s delivered to franchise %s.', transport.pk, transport.franchise_id)
        return transport
