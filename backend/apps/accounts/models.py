from decimal import Decimal
from django.db import models
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.core.validators import MinValueValidator
from django.utils import timezone
from .managers import UserManager


# ============================
# User Model
# ============================

class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom user model with email-based authentication.
    Carries the spendable balance used by the order escrow engine.
    """

    class Role(models.TextChoices):
        ADMIN = "ADMIN", "Admin"
        FREELANCER = "FREELANCER", "Freelancer"
        CLIENT = "CLIENT", "Client"

    # Core fields
    email = models.EmailField(unique=True, db_index=True)
    name = models.CharField(max_length=150, blank=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.CLIENT, db_index=True)

    # Account status
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # Ledger balance. Only LedgerService writes this column.
    balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Spendable balance"
    )

    # Reputation (recomputed from reviews, never incremented)
    avg_rating = models.DecimalField(max_digits=3, decimal_places=2, default=Decimal('0.00'))
    total_reviews = models.PositiveIntegerField(default=0)

    # Timestamps
    date_joined = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        indexes = [
            models.Index(fields=['email'], name='user_email_idx'),
            models.Index(fields=['role'], name='user_role_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                check=models.Q(balance__gte=0),
                name='user_balance_non_negative',
            ),
        ]

    def __str__(self):
        return self.email

    @property
    def is_client(self):
        return self.role == self.Role.CLIENT

    @property
    def is_freelancer(self):
        return self.role == self.Role.FREELANCER

    @property
    def is_admin(self):
        return self.role == self.Role.ADMIN or self.is_superuser
