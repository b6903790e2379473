"""
Shared fixtures for order tests.
"""
from datetime import timedelta
from decimal import Decimal
from django.contrib.auth import get_user_model
from django.db.models import Sum
from django.utils import timezone
from apps.gigs.models import Gig
from apps.orders.models import Order
from apps.orders.services.ledger_service import LedgerService
from apps.orders.services.order_service import OrderService

User = get_user_model()


class OrderFixturesMixin:
    """Users, a gig and helpers to drive orders through their states."""

    PRICE = 100

    def setUp(self):
        super().setUp()

        self.client_user = User.objects.create_user(
            email='client@test.com',
            password='testpass123',
            name='Client',
            role=User.Role.CLIENT
        )
        self.freelancer = User.objects.create_user(
            email='freelancer@test.com',
            password='testpass123',
            name='Freelancer',
            role=User.Role.FREELANCER
        )
        self.stranger = User.objects.create_user(
            email='stranger@test.com',
            password='testpass123',
            role=User.Role.CLIENT
        )

        self.gig = Gig.objects.create(
            freelancer=self.freelancer,
            title='Logo design',
            description='A logo for your brand',
            category='design',
            price=self.PRICE,
            duration_days=3
        )

    def fund(self, user, amount):
        LedgerService.deposit(user, amount)

    def balance(self, user):
        user.refresh_from_db(fields=['balance'])
        return user.balance

    def place_order(self, fund=True):
        if fund:
            self.fund(self.client_user, self.gig.price)
        return OrderService.create_order(
            gig_id=self.gig.id,
            client=self.client_user,
            requirements='Blue and white, vector format'
        )

    def start(self, order):
        return OrderService.start_order(order.id, self.freelancer)

    def deliver(self, order):
        return OrderService.deliver_order(
            order.id, self.freelancer, 'deliveries/logo.zip', 'Final files attached'
        )

    def delivered_order(self):
        order = self.place_order()
        self.start(order)
        return self.deliver(order)

    def completed_order(self):
        order = self.delivered_order()
        return OrderService.approve_delivery(order.id, self.client_user)

    def make_overdue(self, order, days=1):
        Order.objects.filter(id=order.id).update(
            due_date=timezone.now() - timedelta(days=days)
        )
        order.refresh_from_db()
        return order

    def total_funds(self):
        """Spendable balances plus money still held in escrow."""
        balances = User.objects.aggregate(total=Sum('balance'))['total'] or Decimal('0')
        held = Order.objects.filter(
            refund_log__isnull=True,
            transfer_log__isnull=True
        ).aggregate(total=Sum('price'))['total'] or 0
        return balances + held
