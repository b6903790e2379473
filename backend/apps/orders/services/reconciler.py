"""
Settlement reconciler - applies refunds and payouts that are owed but missing.
Safe to run repeatedly and concurrently; EscrowService claims each
settlement with a unique log row before moving any money.
"""
import logging
from typing import Callable
from django.db import transaction, DatabaseError
from apps.orders.models import Order
from apps.orders.exceptions import OrderError
from apps.orders.services.escrow_service import EscrowService

logger = logging.getLogger('ledger')


class SettlementReconciler:
    """
    Batch settlement of terminal orders.
    Failures on one order are logged and retried on the next run.
    """

    @staticmethod
    def pending_refunds():
        """Approved cancellations with no refund log."""
        return Order.objects.filter(
            status=Order.CANCELLED,
            cancellation_approved=True,
            refund_log__isnull=True
        )

    @staticmethod
    def pending_payouts():
        """Completed orders with no transfer log."""
        return Order.objects.filter(
            status=Order.COMPLETED,
            transfer_log__isnull=True
        )

    @staticmethod
    @transaction.atomic
    def _settle(order_id: int, settle: Callable[[Order], bool]) -> bool:
        order = Order.objects.select_for_update().get(id=order_id)
        return settle(order)

    @classmethod
    def _run(cls, queryset, settle: Callable[[Order], bool], kind: str) -> int:
        applied = 0
        for order_id in list(queryset.order_by('id').values_list('id', flat=True)):
            try:
                if cls._settle(order_id, settle):
                    applied += 1
            except (OrderError, Order.DoesNotExist, DatabaseError):
                logger.exception(f"Failed to apply {kind} for order {order_id}")

        if applied:
            logger.info(f"Reconciler applied {applied} {kind}s")
        return applied

    @classmethod
    def reconcile_refunds(cls) -> int:
        """Refund every approved cancellation not yet refunded."""
        return cls._run(cls.pending_refunds(), EscrowService.refund_order, 'refund')

    @classmethod
    def reconcile_payouts(cls) -> int:
        """Pay out every completed order not yet paid."""
        return cls._run(cls.pending_payouts(), EscrowService.pay_out_order, 'payout')

    @classmethod
    def reconcile_settlements(cls) -> int:
        """
        Run both passes.

        Returns:
            Total number of refunds and payouts applied
        """
        return cls.reconcile_refunds() + cls.reconcile_payouts()
