"""
Management command to run the order background jobs in the foreground.

Usage:
    python manage.py run_order_scheduler
    python manage.py run_order_scheduler --sweep-minutes 5 --reconcile-minutes 10
"""
from django.core.management.base import BaseCommand
from apps.orders.scheduler import OrderScheduler


class Command(BaseCommand):
    help = 'Run the late sweep and settlement reconciliation on an interval'

    def add_arguments(self, parser):
        parser.add_argument(
            '--sweep-minutes',
            type=int,
            default=None,
            help='Late sweep interval (default: ORDERS["LATE_SWEEP_INTERVAL_MINUTES"])',
        )
        parser.add_argument(
            '--reconcile-minutes',
            type=int,
            default=None,
            help='Reconciliation interval (default: ORDERS["RECONCILE_INTERVAL_MINUTES"])',
        )

    def handle(self, *args, **options):
        scheduler = OrderScheduler(
            sweep_minutes=options['sweep_minutes'],
            reconcile_minutes=options['reconcile_minutes']
        )
        self.stdout.write(
            f'Starting order scheduler (sweep every {scheduler.sweep_minutes}m, '
            f'reconcile every {scheduler.reconcile_minutes}m)'
        )
        scheduler.start()
