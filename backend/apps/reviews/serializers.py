"""
Review serializers.
"""
from rest_framework import serializers
from apps.accounts.serializers import PublicUserSerializer
from apps.reviews.models import Review


class ReviewSerializer(serializers.ModelSerializer):
    """Serializer for reviews."""
    order_id = serializers.IntegerField(read_only=True)
    gig_id = serializers.IntegerField(read_only=True)
    freelancer_id = serializers.IntegerField(read_only=True)
    client = PublicUserSerializer(read_only=True)

    class Meta:
        model = Review
        fields = [
            'id', 'order_id', 'gig_id', 'freelancer_id', 'client',
            'rating', 'comment', 'created_at'
        ]
        read_only_fields = fields


class CreateReviewSerializer(serializers.Serializer):
    """Serializer for creating reviews."""
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField(max_length=1000)
