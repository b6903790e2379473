"""
Review service - business logic for reviews and ratings.
Handles review creation, validation, and gig/freelancer rating updates.
"""
import logging
from decimal import Decimal
from typing import Optional
from django.db import transaction, IntegrityError
from django.db.models import Avg, Count
from django.core.exceptions import ValidationError
from apps.accounts.models import User
from apps.gigs.models import Gig
from apps.orders.models import Order
from apps.orders.exceptions import OrderNotFound, Forbidden, InvalidTransition
from apps.reviews.models import Review

logger = logging.getLogger('reviews')


class ReviewService:
    """
    Service for managing reviews and ratings.
    Aggregates are always recomputed from the full review set.
    """

    @staticmethod
    @transaction.atomic
    def create_review(order_id: int, client: User, rating: int, comment: str) -> Review:
        """
        Create a review for a completed order.

        Security:
        - Only the order's client can review
        - Order must be COMPLETED
        - One review per order

        Args:
            order_id: Order to review
            client: Client creating review
            rating: Rating (1-5)
            comment: Review text

        Returns:
            Created Review
        """
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationError({'rating': "Rating must be an integer between 1 and 5."})

        comment = (comment or '').strip()
        if not comment:
            raise ValidationError({'comment': "This field may not be blank."})
        if len(comment) > 1000:
            raise ValidationError({'comment': "Ensure this field has no more than 1000 characters."})

        try:
            order = Order.objects.select_for_update().get(id=order_id)
        except Order.DoesNotExist:
            raise OrderNotFound()

        if not order.is_client(client):
            raise Forbidden("Only the client can review this order")

        if order.status != Order.COMPLETED:
            raise InvalidTransition("Only completed orders can be reviewed")

        if Review.objects.filter(order_id=order.id).exists():
            raise ValidationError("Order already has a review")

        try:
            with transaction.atomic():
                review = Review.objects.create(
                    order=order,
                    client=client,
                    freelancer_id=order.freelancer_id,
                    gig_id=order.gig_id,
                    rating=rating,
                    comment=comment
                )
        except IntegrityError:
            raise ValidationError("Order already has a review")

        ReviewService.update_gig_rating(order.gig_id)
        ReviewService.update_freelancer_rating(order.freelancer_id)

        logger.info(f"Review {review.id} ({rating}★) created for order {order.id} by {client.email}")
        return review

    @staticmethod
    def _stats(reviews) -> tuple:
        stats = reviews.aggregate(total=Count('id'), avg_rating=Avg('rating'))
        average = Decimal(str(stats['avg_rating'] or 0)).quantize(Decimal('0.01'))
        return average, stats['total'] or 0

    @staticmethod
    def update_gig_rating(gig_id: int) -> None:
        """Recalculate a gig's average rating and review count."""
        rating, total = ReviewService._stats(Review.objects.filter(gig_id=gig_id))
        Gig.objects.filter(id=gig_id).update(rating=rating, total_reviews=total)

    @staticmethod
    def update_freelancer_rating(freelancer_id: int) -> None:
        """Recalculate a freelancer's average rating across all gigs."""
        rating, total = ReviewService._stats(Review.objects.filter(freelancer_id=freelancer_id))
        User.objects.filter(id=freelancer_id).update(avg_rating=rating, total_reviews=total)

    @staticmethod
    @transaction.atomic
    def recalculate_all_ratings() -> int:
        """
        Recompute every gig and freelancer aggregate from scratch.

        Returns:
            Number of gigs updated
        """
        gig_ids = list(Gig.objects.values_list('id', flat=True))
        for gig_id in gig_ids:
            ReviewService.update_gig_rating(gig_id)

        freelancer_ids = User.objects.filter(role=User.Role.FREELANCER).values_list('id', flat=True)
        for freelancer_id in freelancer_ids:
            ReviewService.update_freelancer_rating(freelancer_id)

        logger.info(f"Recalculated ratings for {len(gig_ids)} gigs")
        return len(gig_ids)

    @staticmethod
    def get_freelancer_reviews(freelancer_id: int, limit: Optional[int] = None):
        """Reviews received by a freelancer, newest first."""
        reviews = Review.objects.filter(
            freelancer_id=freelancer_id
        ).select_related('client').order_by('-created_at')

        if limit:
            reviews = reviews[:limit]

        return reviews

    @staticmethod
    def get_gig_reviews(gig_id: int, limit: Optional[int] = None):
        """Reviews left on a gig's orders, newest first."""
        reviews = Review.objects.filter(
            gig_id=gig_id
        ).select_related('client').order_by('-created_at')

        if limit:
            reviews = reviews[:limit]

        return reviews
