"""
Gig removal service.
Gig deletion is the trigger for cascading order cancellation.
"""
import logging
from django.db import transaction
from apps.gigs.models import Gig
from apps.accounts.models import User
from apps.orders.exceptions import Forbidden, GigNotFound
from apps.orders.services.cascade_canceller import CascadeCanceller

logger = logging.getLogger('orders')


class GigService:
    """
    Service for gig removal.
    """

    @staticmethod
    @transaction.atomic
    def delete_gig(gig_id: int, user: User) -> int:
        """
        Delete a gig after cancelling its open orders.

        Security:
        - Ownership validation (admins may remove any gig)
        - Cancellation and row removal share one transaction

        Returns:
            Number of orders cancelled by the cascade
        """
        try:
            gig = Gig.objects.select_for_update().get(id=gig_id)
        except Gig.DoesNotExist:
            raise GigNotFound()

        if not (gig.is_owner(user) or user.is_admin):
            raise Forbidden("You can only delete your own gigs")

        cancelled = CascadeCanceller.on_gig_deleted(gig.id)
        gig.delete()

        logger.info(f"Gig {gig_id} deleted by {user.email}; {cancelled} open orders cancelled")
        return cancelled
