"""
Tests for gig deletion and the order cascade.
"""
from decimal import Decimal
from django.conf import settings
from django.test import TestCase
from apps.gigs.models import Gig
from apps.gigs.services.gig_service import GigService
from apps.orders.exceptions import Forbidden, GigNotFound
from apps.orders.models import Order, OrderStateLog, RefundLog
from apps.orders.services.cascade_canceller import CascadeCanceller
from apps.orders.services.order_service import OrderService
from apps.orders.services.reconciler import SettlementReconciler
from apps.orders.services.state_machine import StateMachine
from apps.orders.tests.base import OrderFixturesMixin


class CascadeCancellerTestCase(OrderFixturesMixin, TestCase):
    """Test cancelling a deleted gig's open orders."""

    def setUp(self):
        super().setUp()
        self.pending = self.place_order()
        self.in_progress = self.start(self.place_order())
        self.completed = self.completed_order()

    def test_open_orders_cancelled_completed_untouched(self):
        cancelled = CascadeCanceller.on_gig_deleted(self.gig.id)

        self.assertEqual(cancelled, 2)
        for order in (self.pending, self.in_progress):
            order.refresh_from_db()
            self.assertEqual(order.status, Order.CANCELLED)
            self.assertTrue(order.cancellation_approved)
            self.assertEqual(order.cancellation_reason, settings.ORDERS['GIG_DELETED_REASON'])
            log = OrderStateLog.objects.get(order=order, event=StateMachine.GIG_DELETED)
            self.assertIsNone(log.changed_by)

        self.completed.refresh_from_db()
        self.assertEqual(self.completed.status, Order.COMPLETED)

    def test_cascade_leaves_refund_to_reconciler(self):
        CascadeCanceller.on_gig_deleted(self.gig.id)

        self.assertFalse(RefundLog.objects.exists())
        self.assertEqual(self.balance(self.client_user), Decimal('0.00'))

        self.assertEqual(SettlementReconciler.reconcile_refunds(), 2)
        self.assertEqual(self.balance(self.client_user), Decimal('200.00'))

    def test_cancellation_requested_and_late_orders_included(self):
        OrderService.request_cancellation(self.pending.id, self.client_user, 'Changed my mind')
        Order.objects.filter(id=self.in_progress.id).update(status=Order.LATE, is_late=True)

        self.assertEqual(CascadeCanceller.on_gig_deleted(self.gig.id), 2)

    def test_second_run_finds_nothing(self):
        CascadeCanceller.on_gig_deleted(self.gig.id)

        self.assertEqual(CascadeCanceller.on_gig_deleted(self.gig.id), 0)


class GigServiceTestCase(OrderFixturesMixin, TestCase):
    """Test gig removal through GigService."""

    def test_owner_deletes_gig(self):
        order = self.place_order()

        cancelled = GigService.delete_gig(self.gig.id, self.freelancer)

        self.assertEqual(cancelled, 1)
        self.assertFalse(Gig.objects.filter(id=self.gig.id).exists())
        order.refresh_from_db()
        self.assertEqual(order.status, Order.CANCELLED)
        self.assertEqual(order.gig_id, self.gig.id)

    def test_other_user_cannot_delete(self):
        order = self.place_order()

        with self.assertRaises(Forbidden):
            GigService.delete_gig(self.gig.id, self.client_user)

        order.refresh_from_db()
        self.assertEqual(order.status, Order.PENDING)
        self.assertTrue(Gig.objects.filter(id=self.gig.id).exists())

    def test_unknown_gig(self):
        with self.assertRaises(GigNotFound):
            GigService.delete_gig(999999, self.freelancer)

    def test_deleted_gig_cannot_be_ordered(self):
        GigService.delete_gig(self.gig.id, self.freelancer)
        self.fund(self.client_user, 100)

        with self.assertRaises(GigNotFound):
            OrderService.create_order(self.gig.id, self.client_user, 'Too late')
