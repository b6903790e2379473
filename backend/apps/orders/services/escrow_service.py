"""
Escrow service - releases held order funds exactly once.
Critical: handles every balance change that settles an order.
"""
import logging
from django.db import transaction, IntegrityError
from apps.orders.models import Order, RefundLog, TransferLog
from apps.orders.exceptions import InvalidTransition
from apps.orders.services.ledger_service import LedgerService

logger = logging.getLogger('ledger')


class EscrowService:
    """
    Settles escrowed order funds.
    The unique settlement log row is claimed first; the credit only
    happens if this call inserted it. Both share one transaction.
    """

    @staticmethod
    @transaction.atomic
    def refund_order(order: Order) -> bool:
        """
        Return the escrowed price to the client of a cancelled order.

        Args:
            order: Order in CANCELLED state with cancellation approved

        Returns:
            True if the refund was applied now, False if it already had been
        """
        if order.status != Order.CANCELLED or not order.cancellation_approved:
            raise InvalidTransition(
                f"Order {order.id} is not an approved cancellation; cannot refund"
            )

        try:
            with transaction.atomic():
                RefundLog.objects.create(
                    order_id=order.id,
                    client_id=order.client_id,
                    amount=order.price
                )
        except IntegrityError:
            logger.info(f"Refund for order {order.id} already applied; skipping")
            return False

        LedgerService.credit(order.client_id, order.price)

        logger.info(f"Refunded {order.price} to client {order.client_id} for order {order.id}")
        return True

    @staticmethod
    @transaction.atomic
    def pay_out_order(order: Order) -> bool:
        """
        Release the escrowed price to the freelancer of a completed order.

        Args:
            order: Order in COMPLETED state

        Returns:
            True if the payout was applied now, False if it already had been
        """
        if order.status != Order.COMPLETED:
            raise InvalidTransition(
                f"Order {order.id} is not completed; cannot pay out"
            )

        try:
            with transaction.atomic():
                TransferLog.objects.create(
                    order_id=order.id,
                    amount=order.price,
                    from_user_id=order.client_id,
                    to_user_id=order.freelancer_id
                )
        except IntegrityError:
            logger.info(f"Payout for order {order.id} already applied; skipping")
            return False

        LedgerService.credit(order.freelancer_id, order.price)

        logger.info(f"Paid out {order.price} to freelancer {order.freelancer_id} for order {order.id}")
        return True
