"""
Management command to flag orders past their due date.

Usage:
    python manage.py sweep_late_orders --dry-run  # Preview
    python manage.py sweep_late_orders            # Execute
"""
from django.core.management.base import BaseCommand
from apps.orders.services.late_order_sweeper import LateOrderSweeper


class Command(BaseCommand):
    help = 'Mark overdue open orders as late'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Preview overdue orders without changing them',
        )

    def handle(self, *args, **options):
        if options['dry_run']:
            overdue = LateOrderSweeper.candidates()
            count = overdue.count()
            self.stdout.write(
                self.style.WARNING(f'DRY RUN: Would mark {count} orders late')
            )
            for order in overdue[:10]:
                self.stdout.write(f'  - Order {order.id} ({order.status}, due {order.due_date})')
            if count > 10:
                self.stdout.write(f'  ... and {count - 10} more')
            return

        marked = LateOrderSweeper.sweep()
        self.stdout.write(self.style.SUCCESS(f'Marked {marked} orders late'))
