"""
Order engine error kinds.
Each kind carries a stable code and the HTTP status it maps to.
"""
from django.core.exceptions import PermissionDenied


class OrderError(Exception):
    """Base class for business-rule violations raised by the order engine."""
    code = 'order_error'
    status_code = 400
    default_message = 'Order operation failed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class OrderNotFound(OrderError):
    code = 'order_not_found'
    status_code = 404
    default_message = 'Order not found'


class GigNotFound(OrderError):
    code = 'gig_not_found'
    status_code = 404
    default_message = 'Gig not found'


class UserNotFound(OrderError):
    code = 'user_not_found'
    status_code = 404
    default_message = 'User not found'


class Forbidden(OrderError, PermissionDenied):
    code = 'forbidden'
    status_code = 403
    default_message = 'You do not have permission to perform this action'


class InvalidTransition(OrderError):
    code = 'invalid_transition'
    status_code = 409
    default_message = 'This action is not allowed in the current order state'


class ConcurrencyConflict(InvalidTransition):
    """The order changed between read and write; re-fetch before retrying."""
    code = 'concurrency_conflict'
    default_message = 'The order was modified by another request'


class InsufficientFunds(OrderError):
    code = 'insufficient_funds'
    status_code = 400
    default_message = 'Insufficient balance'

    def __init__(self, message=None, required=None, available=None):
        super().__init__(message)
        self.required = required
        self.available = available
