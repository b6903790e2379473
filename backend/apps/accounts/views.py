from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema

from .serializers import UserSerializer, DepositSerializer
from apps.orders.services.ledger_service import LedgerService

import logging

logger = logging.getLogger('ledger')


# ============================
# My Profile
# ============================

@extend_schema(tags=['Accounts'], responses=UserSerializer)
@api_view(["GET"])
@permission_classes([IsAuthenticated])
def me_view(request):
    """
    Get current user's profile, balance included.
    """
    serializer = UserSerializer(request.user)
    return Response(serializer.data)


# ============================
# Add Balance
# ============================

@extend_schema(tags=['Accounts'], request=DepositSerializer, responses=UserSerializer)
@api_view(["POST"])
@permission_classes([IsAuthenticated])
def deposit_view(request):
    """
    Add funds to the current user's balance.
    """
    serializer = DepositSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    user = LedgerService.deposit(request.user, serializer.validated_data['amount'])
    return Response(UserSerializer(user).data)
