"""
Cascade canceller - cancels the open orders of a gig being removed.
"""
import logging
from django.conf import settings
from django.db import transaction
from apps.orders.models import Order
from apps.orders.exceptions import ConcurrencyConflict
from apps.orders.services.state_machine import StateMachine

logger = logging.getLogger('orders')


class CascadeCanceller:
    """
    Gig deletion hook.
    Orders are cancelled with the cancellation already approved; the
    refund itself is left to SettlementReconciler.
    """

    @staticmethod
    @transaction.atomic
    def on_gig_deleted(gig_id: int) -> int:
        """
        Cancel every open order of a gig.

        Args:
            gig_id: Gig being removed

        Returns:
            Number of orders cancelled
        """
        reason = settings.ORDERS['GIG_DELETED_REASON']

        orders = list(
            Order.objects.select_for_update().filter(
                gig_id=gig_id,
                status__in=Order.OPEN_STATES
            ).order_by('id')
        )

        cancelled = 0
        for order in orders:
            try:
                StateMachine.transition(
                    order=order,
                    event=StateMachine.GIG_DELETED,
                    user=None,
                    reason=reason,
                    cancellation_reason=reason,
                    cancellation_approved=True
                )
            except ConcurrencyConflict:
                continue
            cancelled += 1

        logger.info(f"Gig {gig_id} removal cancelled {cancelled} open orders")
        return cancelled
