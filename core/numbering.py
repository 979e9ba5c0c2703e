"""
Core — Document Numbering

Sequential, human-readable document numbers of the form
``{PREFIX}-DDMMYYYY-NNNN``. The sequence restarts every day and is
scoped to the prefix.

@file core/numbering.py
"""

from django.utils import timezone

from core.constants import NUMBER_SEQUENCE_WIDTH


def format_number(prefix: str, day, seq: int) -> str:
    return f'{prefix}-{day:%d%m%Y}-{seq:0{NUMBER_SEQUENCE_WIDTH}d}'


def next_number(model, field: str, prefix: str, on=None) -> str:
    """
    Return the next free number for ``model.field`` on the given day.

    Must run inside the caller's transaction; the field carries a unique
    constraint so a concurrent duplicate aborts that transaction.
    """
    if on is None:
        day = timezone.localdate()
    elif hasattr(on, 'hour'):
        day = timezone.localdate(on)
    else:
        day = on
    stem = f'{prefix}-{day:%d%m%Y}-'
    existing = (
        model.objects
        .filter(**{f'{field}__startswith': stem})
        .values_list(field, flat=True)
    )
    max_seq = 0
    for value in existing:
        try:
            max_seq = max(max_seq, int(value.rsplit('-', 1)[-1]))
        except (ValueError, IndexError):
            pass
    return format_number(prefix, day, max_seq + 1)
