"""
Late order sweeper - flags orders that passed their due date.
Run periodically by the order scheduler; request handlers never sweep.
"""
import logging
from datetime import datetime
from typing import Optional
from django.db import transaction, DatabaseError
from django.utils import timezone
from apps.orders.models import Order
from apps.orders.services.state_machine import StateMachine

logger = logging.getLogger('orders')


class LateOrderSweeper:
    """
    Marks overdue open orders as late.
    An in-progress order also moves to the LATE state; orders in other
    open states only get the flag. The flag is never cleared.
    """

    @staticmethod
    def candidates(now: Optional[datetime] = None):
        """Overdue, non-terminal orders not yet flagged."""
        now = now or timezone.now()
        return Order.objects.filter(
            is_late=False,
            due_date__lt=now
        ).exclude(status__in=Order.TERMINAL_STATES)

    @classmethod
    def sweep(cls, now: Optional[datetime] = None) -> int:
        """
        Flag every overdue order.

        Returns:
            Number of orders marked late by this run
        """
        now = now or timezone.now()
        order_ids = list(cls.candidates(now).values_list('id', flat=True))

        marked = 0
        for order_id in order_ids:
            try:
                if cls._mark_late(order_id, now):
                    marked += 1
            except DatabaseError:
                logger.exception(f"Failed to mark order {order_id} late")

        if marked:
            logger.info(f"Late sweep marked {marked} of {len(order_ids)} overdue orders")
        return marked

    @staticmethod
    @transaction.atomic
    def _mark_late(order_id: int, now: datetime) -> bool:
        try:
            order = Order.objects.select_for_update().get(id=order_id)
        except Order.DoesNotExist:
            return False

        # Re-check under the lock; another transition may have won
        if order.is_late or order.is_terminal or order.due_date >= now:
            return False

        if order.status == Order.IN_PROGRESS:
            StateMachine.transition(
                order=order,
                event=StateMachine.MARK_LATE,
                user=None,
                reason="Due date passed",
                expected={'is_late': False},
                is_late=True
            )
            return True

        updated = Order.objects.filter(
            id=order.id,
            status=order.status,
            is_late=False
        ).update(is_late=True, updated_at=now)

        if updated:
            logger.info(f"Order {order.id} flagged late in state {order.status}")
        return bool(updated)
