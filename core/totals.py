"""
Core — Amount Validation

Server-side recomputation of line amounts and document totals. Amounts
submitted by clients are accepted only when they agree with the
recomputed value to within one paisa.

@file core/totals.py
"""

from decimal import ROUND_HALF_UP, Decimal

from core.exceptions import BusinessRuleViolation, TotalMismatchError

CENT = Decimal('0.01')
TOLERANCE = Decimal('0.01')


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def _check(expected: Decimal, submitted, what: str) -> Decimal:
    if submitted is not None and abs(money(submitted) - expected) > TOLERANCE:
        raise TotalMismatchError(
            detail=f'{what} mismatch: submitted {money(submitted)}, expected {expected}.',
        )
    return expected


def line_amount(unit_price, qty: int, submitted=None, *, label: str = 'Line amount') -> Decimal:
    return _check(money(Decimal(str(unit_price)) * qty), submitted, label)


def discounted_total(subtotal, discount_percent=0, submitted=None) -> Decimal:
    discount_percent = Decimal(str(discount_percent or 0))
    if discount_percent < 0 or discount_percent > 100:
        raise BusinessRuleViolation(detail='Discount percent must be between 0 and 100.')
    subtotal = Decimal(str(subtotal))
    total = money(max(Decimal('0'), subtotal - subtotal * discount_percent / 100))
    return _check(total, submitted, 'Total amount')
