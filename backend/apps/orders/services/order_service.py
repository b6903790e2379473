"""
Order service - main business logic for order management.
Orchestrates state machine, balance ledger and escrow settlement.
"""
import logging
from datetime import timedelta
from typing import Optional
from django.conf import settings
from django.db import transaction
from django.db.models import Q, QuerySet
from django.core.exceptions import ValidationError
from django.utils import timezone
from apps.accounts.models import User
from apps.gigs.models import Gig
from apps.orders.models import Order, OrderStateLog
from apps.orders.exceptions import OrderNotFound, GigNotFound, Forbidden
from apps.orders.services.state_machine import StateMachine
from apps.orders.services.ledger_service import LedgerService
from apps.orders.services.escrow_service import EscrowService

logger = logging.getLogger('orders')


class OrderService:
    """
    Main service for order operations.
    Every mutating call locks the order row and runs in one transaction,
    so the status change, the balance change and the audit row commit together.
    """

    @staticmethod
    def _require_text(value: Optional[str], field: str, max_length: Optional[int] = None) -> str:
        value = (value or '').strip()
        if not value:
            raise ValidationError({field: "This field may not be blank."})
        if max_length and len(value) > max_length:
            raise ValidationError({field: f"Ensure this field has no more than {max_length} characters."})
        return value

    @classmethod
    @transaction.atomic
    def create_order(cls, gig_id: int, client: User, requirements: str) -> Order:
        """
        Place an order for a gig and move its price into escrow.

        Security:
        - Only clients can order
        - Prevents ordering your own gig
        - Debit is conditional on the balance covering the price

        Args:
            gig_id: Gig being ordered
            client: User placing the order
            requirements: Instructions for the freelancer

        Returns:
            Created order in PENDING state
        """
        requirements = cls._require_text(requirements, 'requirements', max_length=5000)

        if not client.is_client:
            raise Forbidden("Only clients can place orders")

        # Lock the gig so a concurrent deletion either sees this order or rejects it
        try:
            gig = Gig.objects.select_for_update().get(id=gig_id)
        except Gig.DoesNotExist:
            raise GigNotFound()

        if gig.is_owner(client):
            raise Forbidden("Cannot order your own gig")

        LedgerService.debit(client.id, gig.price)

        duration = gig.duration_days or settings.ORDERS['DEFAULT_DURATION_DAYS']
        order = Order.objects.create(
            gig=gig,
            client=client,
            freelancer_id=gig.freelancer_id,
            price=gig.price,
            requirements=requirements,
            status=Order.PENDING,
            due_date=timezone.now() + timedelta(days=duration),
            is_late=False
        )

        OrderStateLog.objects.create(
            order=order,
            from_state='',
            to_state=Order.PENDING,
            event=StateMachine.CREATE,
            changed_by=client,
            reason="Order placed"
        )

        client.refresh_from_db(fields=['balance'])
        logger.info(f"Order {order.id} created by {client.email} for gig {gig.id} ({order.price} in escrow)")

        return order

    @classmethod
    @transaction.atomic
    def start_order(cls, order_id: int, freelancer: User) -> Order:
        """Freelancer accepts the order and starts working on it."""
        order = StateMachine.lock(order_id)
        StateMachine.validate_user_can_fire(order, freelancer, StateMachine.START)

        return StateMachine.transition(
            order=order,
            event=StateMachine.START,
            user=freelancer,
            reason="Freelancer started working on order"
        )

    @classmethod
    @transaction.atomic
    def deliver_order(cls, order_id: int, freelancer: User, file: str, notes: str) -> Order:
        """
        Freelancer delivers work.

        Args:
            order_id: Order to deliver
            freelancer: Freelancer delivering
            file: Storage reference of the delivered file
            notes: Delivery notes for the client

        Returns:
            Updated order in DELIVERED state
        """
        file = cls._require_text(file, 'file')
        notes = cls._require_text(notes, 'notes')

        order = StateMachine.lock(order_id)
        StateMachine.validate_user_can_fire(order, freelancer, StateMachine.DELIVER)

        return StateMachine.transition(
            order=order,
            event=StateMachine.DELIVER,
            user=freelancer,
            reason="Freelancer delivered work",
            delivery_file=file,
            delivery_notes=notes,
            delivered_at=timezone.now()
        )

    @classmethod
    @transaction.atomic
    def approve_delivery(cls, order_id: int, client: User) -> Order:
        """
        Client accepts the delivery.
        The escrowed price is paid out to the freelancer in the same transaction.
        """
        order = StateMachine.lock(order_id)
        StateMachine.validate_user_can_fire(order, client, StateMachine.APPROVE)

        order = StateMachine.transition(
            order=order,
            event=StateMachine.APPROVE,
            user=client,
            reason="Client approved delivery"
        )

        EscrowService.pay_out_order(order)

        return order

    @classmethod
    @transaction.atomic
    def reject_delivery(cls, order_id: int, client: User) -> Order:
        """Client sends the delivery back for rework."""
        order = StateMachine.lock(order_id)
        StateMachine.validate_user_can_fire(order, client, StateMachine.REJECT)

        return StateMachine.transition(
            order=order,
            event=StateMachine.REJECT,
            user=client,
            reason="Client rejected delivery"
        )

    @classmethod
    @transaction.atomic
    def request_cancellation(cls, order_id: int, actor: User, reason: str) -> Order:
        """
        Either party asks to cancel the order.

        A client cancelling an order that is past due is not asked to wait
        for the freelancer: the order is cancelled and refunded immediately,
        even when an earlier cancellation request is still unanswered.

        Args:
            order_id: Order to cancel
            actor: Client or freelancer of the order
            reason: Why the order should be cancelled

        Returns:
            Order in CANCELLATION_REQUESTED or CANCELLED state
        """
        reason = cls._require_text(reason, 'reason')

        order = StateMachine.lock(order_id)
        StateMachine.validate_user_can_fire(order, actor, StateMachine.REQUEST_CANCEL)

        if order.is_late and order.is_client(actor):
            order = StateMachine.transition(
                order=order,
                event=StateMachine.LATE_CANCEL,
                user=actor,
                reason=reason,
                cancellation_reason=reason,
                cancellation_requested_by=actor,
                cancellation_approved=True
            )
            EscrowService.refund_order(order)
            return order

        return StateMachine.transition(
            order=order,
            event=StateMachine.REQUEST_CANCEL,
            user=actor,
            reason=reason,
            cancellation_reason=reason,
            cancellation_requested_by=actor,
            cancellation_approved=None
        )

    @classmethod
    @transaction.atomic
    def approve_cancellation(cls, order_id: int, actor: User) -> Order:
        """
        The other party agrees to cancel.
        The escrowed price is refunded to the client in the same transaction.
        """
        order = StateMachine.lock(order_id)
        StateMachine.validate_user_can_fire(order, actor, StateMachine.APPROVE_CANCEL)

        order = StateMachine.transition(
            order=order,
            event=StateMachine.APPROVE_CANCEL,
            user=actor,
            reason="Cancellation approved",
            cancellation_approved=True
        )

        EscrowService.refund_order(order)

        return order

    @classmethod
    @transaction.atomic
    def reject_cancellation(cls, order_id: int, actor: User) -> Order:
        """The other party refuses to cancel; work resumes."""
        order = StateMachine.lock(order_id)
        StateMachine.validate_user_can_fire(order, actor, StateMachine.REJECT_CANCEL)

        return StateMachine.transition(
            order=order,
            event=StateMachine.REJECT_CANCEL,
            user=actor,
            reason="Cancellation rejected",
            cancellation_approved=False
        )

    @staticmethod
    def get_order_for_user(order_id: int, user: User) -> Order:
        """
        Fetch an order visible to user.

        Raises:
            OrderNotFound: If the order does not exist
            Forbidden: If user is not a participant
        """
        try:
            order = Order.objects.select_related('client', 'freelancer').get(id=order_id)
        except Order.DoesNotExist:
            raise OrderNotFound()

        if not (order.is_participant(user) or user.is_admin):
            raise Forbidden("You are not a participant in this order")

        return order

    @staticmethod
    def list_orders_for_user(user: User, status: Optional[str] = None) -> QuerySet:
        """Orders where user is the client or the freelancer, newest first."""
        orders = Order.objects.filter(
            Q(client=user) | Q(freelancer=user)
        ).select_related('client', 'freelancer')

        if status:
            orders = orders.filter(status=status)

        return orders.order_by('-created_at')
