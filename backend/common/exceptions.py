"""
DRF exception handler.
Maps order engine errors and Django validation errors to one response shape:
{"error": <message>, "code": <code>}.
"""
import logging
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler
from apps.orders.exceptions import OrderError, InsufficientFunds

logger = logging.getLogger('orders')


def api_exception_handler(exc, context):
    if isinstance(exc, OrderError):
        payload = {'error': exc.message, 'code': exc.code}
        if isinstance(exc, InsufficientFunds):
            if exc.required is not None:
                payload['required'] = str(exc.required)
            if exc.available is not None:
                payload['current'] = str(exc.available)
        logger.warning(f"[{exc.code}] {exc.message} ({context['request'].method} {context['request'].path})")
        return Response(payload, status=exc.status_code)

    if isinstance(exc, DjangoValidationError):
        return Response(
            {'error': ' '.join(exc.messages), 'code': 'validation_error'},
            status=status.HTTP_400_BAD_REQUEST
        )

    return exception_handler(exc, context)
