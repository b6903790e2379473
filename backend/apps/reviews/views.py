"""
Review views and API endpoints.
"""
from rest_framework import status, permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema
from apps.reviews.serializers import ReviewSerializer, CreateReviewSerializer
from apps.reviews.services.review_service import ReviewService


@extend_schema(tags=['Reviews'], request=CreateReviewSerializer, responses={201: ReviewSerializer})
@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def create_review(request, order_id):
    """
    Create a review for an order.
    Only the client can review, only for COMPLETED orders.
    """
    serializer = CreateReviewSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    review = ReviewService.create_review(
        order_id=order_id,
        client=request.user,
        rating=serializer.validated_data['rating'],
        comment=serializer.validated_data['comment']
    )

    return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)


def _limit(request):
    try:
        limit = int(request.query_params.get('limit', 20))
    except ValueError:
        limit = 20
    return max(1, min(limit, 100))  # Max 100 reviews


@extend_schema(tags=['Reviews'], responses=ReviewSerializer(many=True))
@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def get_freelancer_reviews(request, freelancer_id):
    """
    Get reviews for a freelancer.
    Public endpoint.
    """
    reviews = ReviewService.get_freelancer_reviews(freelancer_id, limit=_limit(request))
    return Response(ReviewSerializer(reviews, many=True).data)


@extend_schema(tags=['Reviews'], responses=ReviewSerializer(many=True))
@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def get_gig_reviews(request, gig_id):
    """
    Get reviews for a gig.
    Public endpoint.
    """
    reviews = ReviewService.get_gig_reviews(gig_id, limit=_limit(request))
    return Response(ReviewSerializer(reviews, many=True).data)
