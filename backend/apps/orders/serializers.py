"""
Order serializers.
Handles API input/output for order operations.
"""
from django.conf import settings
from rest_framework import serializers
from apps.accounts.serializers import PublicUserSerializer
from apps.orders.models import Order, OrderStateLog


class OrderStateLogSerializer(serializers.ModelSerializer):
    """Serializer for order state change logs."""
    changed_by_email = serializers.EmailField(source='changed_by.email', read_only=True, default=None)

    class Meta:
        model = OrderStateLog
        fields = [
            'id', 'from_state', 'to_state', 'event',
            'changed_by_email', 'reason', 'created_at'
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Serializer for order list view."""
    client_email = serializers.EmailField(source='client.email', read_only=True)
    freelancer_email = serializers.EmailField(source='freelancer.email', read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'gig_id', 'client_email', 'freelancer_email',
            'price', 'status', 'is_late', 'due_date', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class OrderDetailSerializer(serializers.ModelSerializer):
    """Serializer for detailed order view."""
    client = PublicUserSerializer(read_only=True)
    freelancer = PublicUserSerializer(read_only=True)
    cancellation_requested_by_id = serializers.IntegerField(read_only=True)
    state_logs = OrderStateLogSerializer(many=True, read_only=True)
    refunded = serializers.SerializerMethodField()
    paid_out = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id', 'gig_id', 'client', 'freelancer', 'price', 'requirements',
            'status', 'due_date', 'is_late',
            'delivery_file', 'delivery_notes',
            'cancellation_reason', 'cancellation_requested_by_id', 'cancellation_approved',
            'refunded', 'paid_out', 'state_logs',
            'created_at', 'updated_at', 'delivered_at', 'completed_at'
        ]
        read_only_fields = fields

    def get_refunded(self, obj) -> bool:
        return hasattr(obj, 'refund_log')

    def get_paid_out(self, obj) -> bool:
        return hasattr(obj, 'transfer_log')


class CreateOrderSerializer(serializers.Serializer):
    """Serializer for creating orders."""
    gig_id = serializers.IntegerField(min_value=1)
    requirements = serializers.CharField(max_length=5000)


class DeliverOrderSerializer(serializers.Serializer):
    """Serializer for delivering orders."""
    file = serializers.FileField()
    notes = serializers.CharField(max_length=5000)

    def validate_file(self, value):
        max_mb = settings.ORDERS['MAX_DELIVERY_FILE_MB']
        if value.size > max_mb * 1024 * 1024:
            raise serializers.ValidationError(f"File size cannot exceed {max_mb}MB")
        return value


class CancelOrderSerializer(serializers.Serializer):
    """Serializer for requesting cancellation."""
    reason = serializers.CharField(max_length=1000)
