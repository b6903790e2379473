"""
Management command to apply refunds and payouts that were never settled.

Usage:
    python manage.py reconcile_settlements --dry-run  # Preview
    python manage.py reconcile_settlements            # Execute
"""
from django.core.management.base import BaseCommand
from apps.orders.services.reconciler import SettlementReconciler


class Command(BaseCommand):
    help = 'Refund approved cancellations and pay out completed orders that are unsettled'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Count unsettled orders without moving any balance',
        )

    def handle(self, *args, **options):
        if options['dry_run']:
            refunds = SettlementReconciler.pending_refunds().count()
            payouts = SettlementReconciler.pending_payouts().count()
            self.stdout.write(
                self.style.WARNING(
                    f'DRY RUN: Would apply {refunds} refunds and {payouts} payouts'
                )
            )
            return

        refunds = SettlementReconciler.reconcile_refunds()
        payouts = SettlementReconciler.reconcile_payouts()
        self.stdout.write(
            self.style.SUCCESS(f'Applied {refunds} refunds and {payouts} payouts')
        )
