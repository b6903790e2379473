from decimal import Decimal
from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Current user, including balance and reputation."""

    class Meta:
        model = User
        fields = [
            'id', 'email', 'name', 'role', 'balance',
            'avg_rating', 'total_reviews', 'date_joined'
        ]
        read_only_fields = fields


class PublicUserSerializer(serializers.ModelSerializer):
    """Counterparty view embedded in orders and reviews (no balance)."""

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'role', 'avg_rating', 'total_reviews']
        read_only_fields = fields


class DepositSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0.01')
    )
