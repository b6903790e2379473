"""
Order state machine service.
Handles ALL status transitions with validation, row locking and
optimistic conditional updates keyed on the prior status.
"""
import logging
from typing import Optional
from django.db import transaction
from django.utils import timezone
from apps.orders.models import Order, OrderStateLog
from apps.orders.exceptions import (
    OrderNotFound, Forbidden, InvalidTransition, ConcurrencyConflict
)
from apps.accounts.models import User

logger = logging.getLogger('orders')


class StateMachine:
    """
    Order state machine with strict transition rules.
    Transitions are named events; each event has a fixed set of
    legal source states and one target state.
    """

    # Events
    CREATE = 'create'
    START = 'start'
    DELIVER = 'deliver'
    APPROVE = 'approve'
    REJECT = 'reject'
    REQUEST_CANCEL = 'request_cancel'
    LATE_CANCEL = 'late_cancel'
    APPROVE_CANCEL = 'approve_cancel'
    REJECT_CANCEL = 'reject_cancel'
    GIG_DELETED = 'gig_deleted'
    MARK_LATE = 'mark_late'

    # event -> (legal source states, target state)
    EVENTS = {
        START: ((Order.PENDING,), Order.IN_PROGRESS),
        DELIVER: ((Order.IN_PROGRESS, Order.LATE), Order.DELIVERED),
        APPROVE: ((Order.DELIVERED,), Order.COMPLETED),
        REJECT: ((Order.DELIVERED,), Order.IN_PROGRESS),
        REQUEST_CANCEL: (
            (Order.PENDING, Order.IN_PROGRESS, Order.LATE),
            Order.CANCELLATION_REQUESTED
        ),
        LATE_CANCEL: (
            (Order.PENDING, Order.IN_PROGRESS, Order.LATE, Order.CANCELLATION_REQUESTED),
            Order.CANCELLED
        ),
        APPROVE_CANCEL: ((Order.CANCELLATION_REQUESTED,), Order.CANCELLED),
        REJECT_CANCEL: ((Order.CANCELLATION_REQUESTED,), Order.IN_PROGRESS),
        GIG_DELETED: (
            (Order.PENDING, Order.IN_PROGRESS, Order.CANCELLATION_REQUESTED, Order.LATE),
            Order.CANCELLED
        ),
        MARK_LATE: ((Order.IN_PROGRESS,), Order.LATE),
    }

    # Who may fire each event
    CLIENT = 'client'
    FREELANCER = 'freelancer'
    PARTY = 'party'
    COUNTERPARTY = 'counterparty'
    SYSTEM = 'system'

    EVENT_ACTORS = {
        START: FREELANCER,
        DELIVER: FREELANCER,
        APPROVE: CLIENT,
        REJECT: CLIENT,
        REQUEST_CANCEL: PARTY,
        LATE_CANCEL: CLIENT,
        APPROVE_CANCEL: COUNTERPARTY,
        REJECT_CANCEL: COUNTERPARTY,
        GIG_DELETED: SYSTEM,
        MARK_LATE: SYSTEM,
    }

    @classmethod
    def can_transition(cls, from_state: str, to_state: str) -> bool:
        """Check if any event moves from_state to to_state."""
        return any(
            from_state in sources and target == to_state
            for sources, target in cls.EVENTS.values()
        )

    @classmethod
    def can_fire(cls, event: str, from_state: str) -> bool:
        """Check if event is legal from from_state."""
        sources, _ = cls.EVENTS[event]
        return from_state in sources

    @staticmethod
    def lock(order_id: int) -> Order:
        """
        Re-fetch the order row and lock it for the rest of the transaction.

        Raises:
            OrderNotFound: If no such order exists
        """
        try:
            return Order.objects.select_for_update().get(id=order_id)
        except Order.DoesNotExist:
            raise OrderNotFound()

    @classmethod
    def validate_user_can_fire(cls, order: Order, user: Optional[User], event: str) -> None:
        """
        Validate that user has permission to fire this event on the order.

        Raises:
            Forbidden: If user cannot make this transition
        """
        role = cls.EVENT_ACTORS[event]

        if role == cls.SYSTEM:
            if user is not None:
                raise Forbidden("This transition requires system access")
            return

        if user is None:
            raise Forbidden("This transition requires an authenticated party")

        if role == cls.CLIENT and order.is_client(user):
            return
        if role == cls.FREELANCER and order.is_freelancer(user):
            return
        if role == cls.PARTY and order.is_participant(user):
            return
        if role == cls.COUNTERPARTY and order.is_participant(user):
            if order.cancellation_requested_by_id == user.id:
                raise Forbidden("The party who requested cancellation cannot answer it")
            return

        raise Forbidden(f"You do not have permission to {event.replace('_', ' ')} this order")

    @classmethod
    @transaction.atomic
    def transition(
        cls,
        order: Order,
        event: str,
        user: Optional[User] = None,
        reason: str = "",
        expected: Optional[dict] = None,
        **changes
    ) -> Order:
        """
        Fire an event on an order.

        The write is conditioned on the status the caller read, so a
        concurrent transition makes this one fail instead of overwriting it.

        Args:
            order: Order as read by the caller (normally via lock())
            event: Event name from EVENTS
            user: User making the change (None for system)
            reason: Reason recorded in the audit trail
            expected: Extra column values the row must still hold
            **changes: Additional columns to write with the status

        Returns:
            Updated order

        Raises:
            InvalidTransition: If the event is not legal from the current status
            ConcurrencyConflict: If the row changed since it was read
        """
        from_state = order.status
        if not cls.can_fire(event, from_state):
            raise InvalidTransition(
                f"Cannot {event.replace('_', ' ')} an order that is {from_state}"
            )

        _, to_state = cls.EVENTS[event]
        now = timezone.now()

        if to_state in Order.TERMINAL_STATES:
            changes.setdefault('completed_at', now)

        updated = Order.objects.filter(
            id=order.id,
            status=from_state,
            **(expected or {})
        ).update(status=to_state, updated_at=now, **changes)

        if not updated:
            logger.warning(f"Order {order.id}: {event} lost a race (expected status {from_state})")
            raise ConcurrencyConflict()

        order.refresh_from_db()

        OrderStateLog.objects.create(
            order=order,
            from_state=from_state,
            to_state=to_state,
            event=event,
            changed_by=user,
            reason=reason
        )

        actor = user.email if user else "system"
        logger.info(f"Order {order.id}: {from_state} -> {to_state} ({event} by {actor})")

        return order
