"""
Gig views.
Only removal is exposed here; it drives the order cascade.
"""
from rest_framework import permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema
from apps.gigs.services.gig_service import GigService


@extend_schema(tags=['Gigs'])
@api_view(['DELETE'])
@permission_classes([permissions.IsAuthenticated])
def delete_gig(request, pk):
    """
    Delete a gig owned by the current freelancer.
    Open orders are cancelled and queued for refund.
    """
    cancelled = GigService.delete_gig(pk, request.user)
    return Response({
        'message': 'Gig deleted successfully',
        'cancelled_orders': cancelled
    })
