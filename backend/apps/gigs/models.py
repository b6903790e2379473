"""
Gig model - a freelancer's purchasable service.
"""
from decimal import Decimal
from django.db import models
from django.core.validators import MinValueValidator
from apps.accounts.models import User


class Gig(models.Model):
    """
    Freelancer listing.
    Orders snapshot price and duration at creation time.
    """
    freelancer = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='gigs'
    )

    title = models.CharField(max_length=200)
    description = models.TextField(max_length=5000)
    category = models.CharField(max_length=100, db_index=True)
    image = models.CharField(max_length=500, blank=True)

    # Pricing
    price = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Price charged per order"
    )
    duration_days = models.PositiveIntegerField(
        default=7,
        validators=[MinValueValidator(1)],
        help_text="Days allowed for delivery"
    )

    # Aggregates recomputed from reviews
    rating = models.DecimalField(max_digits=3, decimal_places=2, default=Decimal('0.00'))
    total_reviews = models.PositiveIntegerField(default=0)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Gig'
        verbose_name_plural = 'Gigs'
        indexes = [
            models.Index(fields=['freelancer', '-created_at'], name='gig_freelancer_created_idx'),
            models.Index(fields=['category', '-created_at'], name='gig_category_created_idx'),
        ]
        constraints = [
            models.CheckConstraint(check=models.Q(price__gt=0), name='gig_price_positive'),
            models.CheckConstraint(check=models.Q(duration_days__gt=0), name='gig_duration_positive'),
        ]

    def __str__(self):
        return f"{self.title} by {self.freelancer.email}"

    def is_owner(self, user):
        """Check if user owns this gig."""
        return self.freelancer_id == user.id
