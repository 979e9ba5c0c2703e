"""
Core — Receipt Posting

Creates a numbered receipt against a bill or consultation and keeps the
owner's ``total_received_amount`` equal to the sum of its receipts.

@file core/receipts.py
"""

from django.db.models import Sum

from core.exceptions import BusinessRuleViolation
from core.totals import money


def post_receipt(owner, receipt_model, owner_field: str, data: dict, *, actor=None):
    """``owner`` must already be locked by the caller's transaction."""
    amount = money(data['amount'])
    outstanding = money(owner.total_amount) - money(owner.total_received_amount)
    if amount > outstanding:
        raise BusinessRuleViolation(
            detail=f'Receipt amount {amount} exceeds outstanding amount {outstanding}.',
            code='RECEIPT_EXCEEDS_OUTSTANDING',
        )
    fields = {k: v for k, v in data.items() if v is not None}
    receipt = receipt_model(**fields, created_by=actor, **{owner_field: owner})
    receipt.save()

    received = receipt_model.objects.filter(**{owner_field: owner}).aggregate(total=Sum('amount'))['total']
    owner.total_received_amount = money(received or 0)
    owner.updated_by = actor
    owner.save(update_fields=['total_received_amount', 'updated_by', 'updated_at'])
    return receipt
