"""
Inventory — Celery Tasks

@file inventory/tasks.py
"""

import logging

from celery import shared_task

logger = logging.getLogger('clinicstock')


@shared_task(name='inventory.reconcile_stock_balances')
def reconcile_stock_balances_task():
    """
    Periodic drift check between the ledger and the balance tables.
    Reports only; repairs are done with ``manage.py rebuild_stock_balances``.
    """
    from .reconciliation import find_drift

    drift = find_drift()
    for item in drift:
        logger.warning(
            'Stock drift franchise=%s medicine=%s batch=%s recorded=%d expected=%d',
            item.franchise_id, item.medicine_id, item.batch_number or '*',
            item.recorded, item.expected,
        )
    logger.info('reconcile_stock_balances completed: %d drifting rows.', len(drift))
    return {'drift_count': len(drift)}
