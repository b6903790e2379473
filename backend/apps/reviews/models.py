"""
Reviews models - client ratings for completed orders.
Gig and freelancer aggregates are recomputed from these rows.
"""
from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from apps.accounts.models import User
from apps.gigs.models import Gig
from apps.orders.models import Order


class Review(models.Model):
    """
    Client review of a completed order.
    One review per order.
    """
    order = models.OneToOneField(
        Order,
        on_delete=models.PROTECT,
        related_name='review'
    )
    client = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='reviews_given'
    )
    freelancer = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='reviews_received'
    )
    gig = models.ForeignKey(
        Gig,
        on_delete=models.DO_NOTHING,  # Reviews outlive the gig
        db_constraint=False,
        related_name='reviews'
    )

    # Rating (1-5 stars)
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        help_text="Rating from 1 to 5 stars"
    )
    comment = models.TextField(max_length=1000)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Review'
        verbose_name_plural = 'Reviews'
        indexes = [
            models.Index(fields=['freelancer', '-created_at'], name='review_freelancer_created_idx'),
            models.Index(fields=['gig', '-created_at'], name='review_gig_created_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                check=models.Q(rating__gte=1, rating__lte=5),
                name='review_rating_range'
            ),
        ]

    def __str__(self):
        return f"Review of order {self.order_id} - {self.rating}★"
