"""
Order views and API endpoints.
Business rules live in OrderService; errors are rendered by
common.exceptions.api_exception_handler.
"""
from django.core.exceptions import ValidationError
from django.core.files.storage import default_storage
from rest_framework import status, permissions
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from apps.orders.exceptions import OrderError
from apps.orders.serializers import (
    OrderListSerializer,
    OrderDetailSerializer,
    CreateOrderSerializer,
    DeliverOrderSerializer,
    CancelOrderSerializer
)
from apps.orders.services.order_service import OrderService


@extend_schema(
    methods=['GET'],
    tags=['Orders'],
    parameters=[OpenApiParameter('status', str, description='Filter by order status')],
    responses=OrderListSerializer(many=True)
)
@extend_schema(
    methods=['POST'],
    tags=['Orders'],
    request=CreateOrderSerializer,
    responses={201: OrderDetailSerializer}
)
@api_view(['GET', 'POST'])
@permission_classes([permissions.IsAuthenticated])
def order_list_create(request):
    """
    List the user's orders or place a new one.
    The gig price is moved from the client's balance into escrow.
    """
    if request.method == 'POST':
        serializer = CreateOrderSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        order = OrderService.create_order(
            gig_id=serializer.validated_data['gig_id'],
            client=request.user,
            requirements=serializer.validated_data['requirements']
        )
        return Response(OrderDetailSerializer(order).data, status=status.HTTP_201_CREATED)

    orders = OrderService.list_orders_for_user(
        request.user,
        status=request.query_params.get('status')
    )
    paginator = PageNumberPagination()
    page = paginator.paginate_queryset(orders, request)
    return paginator.get_paginated_response(OrderListSerializer(page, many=True).data)


@extend_schema(tags=['Orders'], responses=OrderDetailSerializer)
@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def order_detail(request, pk):
    """
    Get order details.
    Only the client or the freelancer can view.
    """
    order = OrderService.get_order_for_user(pk, request.user)
    return Response(OrderDetailSerializer(order).data)


@extend_schema(tags=['Orders'], request=None, responses=OrderDetailSerializer)
@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def start_order(request, pk):
    """
    Freelancer starts working on order.
    Transitions: PENDING → IN_PROGRESS
    """
    order = OrderService.start_order(order_id=pk, freelancer=request.user)
    return Response(OrderDetailSerializer(order).data)


@extend_schema(tags=['Orders'], request=DeliverOrderSerializer, responses=OrderDetailSerializer)
@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def deliver_order(request, pk):
    """
    Freelancer delivers order with a file.
    Transitions: IN_PROGRESS/LATE → DELIVERED
    """
    serializer = DeliverOrderSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    upload = serializer.validated_data['file']
    file_name = default_storage.save(f"deliveries/{pk}/{upload.name}", upload)

    try:
        order = OrderService.deliver_order(
            order_id=pk,
            freelancer=request.user,
            file=file_name,
            notes=serializer.validated_data['notes']
        )
    except (OrderError, ValidationError):
        default_storage.delete(file_name)
        raise

    return Response(OrderDetailSerializer(order).data)


@extend_schema(tags=['Orders'], request=None, responses=OrderDetailSerializer)
@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def approve_delivery(request, pk):
    """
    Client approves delivery; the freelancer is paid.
    Transitions: DELIVERED → COMPLETED
    """
    order = OrderService.approve_delivery(order_id=pk, client=request.user)
    return Response(OrderDetailSerializer(order).data)


@extend_schema(tags=['Orders'], request=None, responses=OrderDetailSerializer)
@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def reject_delivery(request, pk):
    """
    Client rejects delivery.
    Transitions: DELIVERED → IN_PROGRESS
    """
    order = OrderService.reject_delivery(order_id=pk, client=request.user)
    return Response(OrderDetailSerializer(order).data)


@extend_schema(tags=['Orders'], request=CancelOrderSerializer, responses=OrderDetailSerializer)
@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def request_cancellation(request, pk):
    """
    Client or freelancer asks to cancel.
    Transitions: PENDING/IN_PROGRESS/LATE → CANCELLATION_REQUESTED,
    or straight to CANCELLED when the client cancels a late order.
    """
    serializer = CancelOrderSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    order = OrderService.request_cancellation(
        order_id=pk,
        actor=request.user,
        reason=serializer.validated_data['reason']
    )
    return Response(OrderDetailSerializer(order).data)


@extend_schema(tags=['Orders'], request=None, responses=OrderDetailSerializer)
@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def approve_cancellation(request, pk):
    """
    The other party approves cancellation; the client is refunded.
    Transitions: CANCELLATION_REQUESTED → CANCELLED
    """
    order = OrderService.approve_cancellation(order_id=pk, actor=request.user)
    return Response(OrderDetailSerializer(order).data)


@extend_schema(tags=['Orders'], request=None, responses=OrderDetailSerializer)
@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def reject_cancellation(request, pk):
    """
    The other party rejects cancellation.
    Transitions: CANCELLATION_REQUESTED → IN_PROGRESS
    """
    order = OrderService.reject_cancellation(order_id=pk, actor=request.user)
    return Response(OrderDetailSerializer(order).data)
