"""
Orders models - Order state machine, state audit trail, settlement logs.
Balances move only alongside a status change and a settlement log row.
"""
from django.db import models
from django.core.validators import MinValueValidator
from apps.accounts.models import User
from apps.gigs.models import Gig


class Order(models.Model):
    """
    Core order model with state machine.
    The price is held in escrow from creation until completion or cancellation.
    """
    # Order states
    PENDING = 'pending'
    IN_PROGRESS = 'in_progress'
    DELIVERED = 'delivered'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'
    CANCELLATION_REQUESTED = 'cancellation_requested'
    LATE = 'late'

    STATE_CHOICES = [
        (PENDING, 'Pending'),
        (IN_PROGRESS, 'In Progress'),
        (DELIVERED, 'Delivered'),
        (COMPLETED, 'Completed'),
        (CANCELLED, 'Cancelled'),
        (CANCELLATION_REQUESTED, 'Cancellation Requested'),
        (LATE, 'Late'),
    ]

    TERMINAL_STATES = (COMPLETED, CANCELLED)
    OPEN_STATES = (PENDING, IN_PROGRESS, CANCELLATION_REQUESTED, LATE)

    # Relations (immutable after creation)
    gig = models.ForeignKey(
        Gig,
        on_delete=models.DO_NOTHING,  # Gig removal cancels orders first; the id is kept
        db_constraint=False,
        related_name='orders'
    )
    client = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='client_orders'
    )
    freelancer = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='freelancer_orders'
    )

    # Order details
    price = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Gig price at time of order, held in escrow"
    )
    requirements = models.TextField(max_length=5000)

    # State
    status = models.CharField(
        max_length=32,
        choices=STATE_CHOICES,
        default=PENDING,
        db_index=True
    )
    due_date = models.DateTimeField(db_index=True)
    is_late = models.BooleanField(default=False, db_index=True)

    # Delivery
    delivery_file = models.CharField(max_length=500, blank=True, null=True)
    delivery_notes = models.TextField(blank=True, null=True)

    # Cancellation
    cancellation_reason = models.TextField(blank=True, null=True)
    cancellation_requested_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    cancellation_approved = models.BooleanField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Order'
        verbose_name_plural = 'Orders'
        indexes = [
            models.Index(fields=['client', 'status', '-created_at'], name='order_client_status_idx'),
            models.Index(fields=['freelancer', 'status', '-created_at'], name='order_freelancer_status_idx'),
            models.Index(fields=['status', 'is_late', 'due_date'], name='order_status_late_due_idx'),
            models.Index(fields=['gig', 'status'], name='order_gig_status_idx'),
        ]
        constraints = [
            models.CheckConstraint(check=models.Q(price__gt=0), name='order_price_positive'),
        ]

    def __str__(self):
        return f"Order {self.id} - {self.status}"

    def is_client(self, user):
        """Check if user is the paying client."""
        return self.client_id == user.id

    def is_freelancer(self, user):
        """Check if user is the freelancer."""
        return self.freelancer_id == user.id

    def is_participant(self, user):
        """Check if user is client or freelancer."""
        return self.is_client(user) or self.is_freelancer(user)

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATES


class OrderStateLog(models.Model):
    """
    Audit trail for order state transitions.
    Written in the same transaction as the status change.
    """
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='state_logs'
    )
    from_state = models.CharField(max_length=32)
    to_state = models.CharField(max_length=32)
    event = models.CharField(max_length=32)
    changed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        help_text="User who triggered change (null for system)"
    )
    reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name = 'Order State Log'
        verbose_name_plural = 'Order State Logs'
        indexes = [
            models.Index(fields=['order', '-created_at'], name='statelog_order_created_idx'),
        ]

    def __str__(self):
        return f"{self.order_id}: {self.from_state} -> {self.to_state}"


class RefundLog(models.Model):
    """
    Append-only record of an escrow refund to the client.
    One row per order; its presence means the refund has been applied.
    """
    order = models.OneToOneField(
        Order,
        on_delete=models.PROTECT,
        related_name='refund_log'
    )
    client = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='refunds_received'
    )
    amount = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = 'refund_log'
        ordering = ['-created_at']
        verbose_name = 'Refund Log'
        verbose_name_plural = 'Refund Logs'

    def __str__(self):
        return f"Refund {self.amount} for order {self.order_id}"


class TransferLog(models.Model):
    """
    Append-only record of an escrow payout to the freelancer.
    One row per order; its presence means the payout has been applied.
    """
    order = models.OneToOneField(
        Order,
        on_delete=models.PROTECT,
        related_name='transfer_log'
    )
    amount = models.PositiveIntegerField()
    from_user = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='transfers_sent'
    )
    to_user = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='transfers_received'
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = 'transfer_log'
        ordering = ['-created_at']
        verbose_name = 'Transfer Log'
        verbose_name_plural = 'Transfer Logs'

    def __str__(self):
        return f"Transfer {self.amount} for order {self.order_id}"
