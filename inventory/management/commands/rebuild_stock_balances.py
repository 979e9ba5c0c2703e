"""
Inventory — Management Command: rebuild_stock_balances

Recomputes franchise batch and aggregate balances from the stock ledger.

Usage::

    python manage.py rebuild_stock_balances [--check]

@file inventory/management/commands/rebuild_stock_balances.py
"""

from django.core.management.base import BaseCommand

from inventory.reconciliation import find_drift, rebuild_balances


class Command(BaseCommand):
    help = 'Rebuild stock balances from the stock ledger.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--check',
            action='store_true',
            help='Report drifting rows without writing.',
        )

    def handle(self, *args, **options):
        drift = find_drift() if options['check'] else rebuild_balances()

        for item in drift:
            scope = 'aggregate' if item.is_aggregate else f'batch {item.batch_number} exp {item.expiry_date}'
            self.stdout.write(
                f'franchise={item.franchise_id} medicine={item.medicine_id} {scope}: '
                f'{item.recorded} -> {item.expected}'
            )

        if not drift:
            self.stdout.write(self.style.SUCCESS('Balances match the ledger.'))
        elif options['check']:
            self.stdout.write(self.style.WARNING(f'{len(drift)} rows drift from the ledger.'))
        else:
            self.stdout.write(self.style.SUCCESS(f'Rebuilt {len(drift)} rows.'))
