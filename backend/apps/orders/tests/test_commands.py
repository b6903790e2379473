"""
Tests for the order management commands and scheduler wiring.
"""
from io import StringIO
from unittest import mock
from django.core.management import call_command
from django.test import TestCase
from apscheduler.triggers.interval import IntervalTrigger
from apps.orders import scheduler
from apps.orders.models import Order, RefundLog
from apps.orders.services.cascade_canceller import CascadeCanceller
from apps.orders.tests.base import OrderFixturesMixin


class OrderCommandsTestCase(OrderFixturesMixin, TestCase):
    """Test sweep_late_orders and reconcile_settlements."""

    def call(self, *args):
        out = StringIO()
        call_command(*args, stdout=out)
        return out.getvalue()

    def test_sweep_late_orders(self):
        order = self.make_overdue(self.start(self.place_order()))

        output = self.call('sweep_late_orders')

        self.assertIn('Marked 1 orders late', output)
        order.refresh_from_db()
        self.assertEqual(order.status, Order.LATE)

    def test_sweep_late_orders_dry_run(self):
        order = self.make_overdue(self.start(self.place_order()))

        output = self.call('sweep_late_orders', '--dry-run')

        self.assertIn('DRY RUN: Would mark 1 orders late', output)
        order.refresh_from_db()
        self.assertEqual(order.status, Order.IN_PROGRESS)
        self.assertFalse(order.is_late)

    def test_reconcile_settlements(self):
        self.place_order()
        CascadeCanceller.on_gig_deleted(self.gig.id)

        output = self.call('reconcile_settlements')

        self.assertIn('Applied 1 refunds and 0 payouts', output)
        self.assertEqual(RefundLog.objects.count(), 1)

    def test_reconcile_settlements_dry_run(self):
        self.place_order()
        CascadeCanceller.on_gig_deleted(self.gig.id)

        output = self.call('reconcile_settlements', '--dry-run')

        self.assertIn('DRY RUN: Would apply 1 refunds and 0 payouts', output)
        self.assertFalse(RefundLog.objects.exists())


class OrderSchedulerTestCase(OrderFixturesMixin, TestCase):
    """Test job registration and the job entry points."""

    def test_jobs_registered_with_configured_intervals(self):
        order_scheduler = scheduler.OrderScheduler(sweep_minutes=5, reconcile_minutes=15)
        order_scheduler.setup_jobs()

        jobs = {job.id: job for job in order_scheduler.scheduler.get_jobs()}
        self.assertEqual(set(jobs), {'orders_late_sweep', 'orders_settlement_reconciliation'})

        sweep = jobs['orders_late_sweep']
        self.assertIsInstance(sweep.trigger, IntervalTrigger)
        self.assertEqual(sweep.trigger.interval.total_seconds(), 5 * 60)
        self.assertEqual(
            jobs['orders_settlement_reconciliation'].trigger.interval.total_seconds(), 15 * 60
        )
        self.assertTrue(sweep.coalesce)
        self.assertEqual(sweep.max_instances, 1)

    def test_intervals_default_to_settings(self):
        order_scheduler = scheduler.OrderScheduler()

        self.assertEqual(order_scheduler.sweep_minutes, 30)
        self.assertEqual(order_scheduler.reconcile_minutes, 60)

    def test_job_entry_points_run_services(self):
        order = self.make_overdue(self.start(self.place_order()))
        other = self.place_order()
        CascadeCanceller.on_gig_deleted(self.gig.id)

        with mock.patch.object(scheduler, 'close_old_connections') as close:
            self.assertEqual(scheduler.run_late_sweep(), 0)
            self.assertEqual(scheduler.run_settlement_reconciliation(), 2)

        self.assertEqual(close.call_count, 4)
        self.assertEqual(RefundLog.objects.filter(order__in=[order, other]).count(), 2)
