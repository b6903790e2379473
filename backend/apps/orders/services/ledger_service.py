"""
Balance ledger - atomic debit and credit of user balances.
Every write is a single conditional UPDATE with an F() expression,
so concurrent requests never act on a stale balance.
"""
import logging
from decimal import Decimal
from typing import Union
from django.db import transaction
from django.db.models import F
from django.core.exceptions import ValidationError
from apps.accounts.models import User
from apps.orders.exceptions import InsufficientFunds, UserNotFound

logger = logging.getLogger('ledger')

Amount = Union[int, Decimal]


class LedgerService:
    """
    Spendable balance operations.
    Callers wrap these in the same transaction as the order change that justifies them.
    """

    @staticmethod
    def _validate_amount(amount: Amount) -> Decimal:
        amount = Decimal(amount)
        if amount <= 0:
            raise ValidationError("Amount must be positive")
        return amount

    @staticmethod
    def get_balance(user_id: int) -> Decimal:
        """Current balance straight from the database row."""
        try:
            return User.objects.values_list('balance', flat=True).get(id=user_id)
        except User.DoesNotExist:
            raise UserNotFound()

    @classmethod
    def debit(cls, user_id: int, amount: Amount) -> None:
        """
        Remove funds from a user's balance.

        Raises:
            InsufficientFunds: If amount exceeds the current balance
            UserNotFound: If the user row does not exist
        """
        amount = cls._validate_amount(amount)

        updated = User.objects.filter(
            id=user_id,
            balance__gte=amount
        ).update(balance=F('balance') - amount)

        if not updated:
            available = cls.get_balance(user_id)
            logger.warning(f"Debit refused for user {user_id}: required {amount}, available {available}")
            raise InsufficientFunds(required=amount, available=available)

        logger.info(f"Debited {amount} from user {user_id}")

    @classmethod
    def credit(cls, user_id: int, amount: Amount) -> None:
        """
        Add funds to a user's balance. No upper bound.

        Raises:
            UserNotFound: If the user row does not exist
        """
        amount = cls._validate_amount(amount)

        updated = User.objects.filter(id=user_id).update(
            balance=F('balance') + amount
        )

        if not updated:
            raise UserNotFound()

        logger.info(f"Credited {amount} to user {user_id}")

    @classmethod
    @transaction.atomic
    def deposit(cls, user: User, amount: Amount) -> User:
        """
        Add external funds to a user's own balance.

        Returns:
            The user refreshed from the database
        """
        cls.credit(user.id, amount)
        user.refresh_from_db(fields=['balance'])
        logger.info(f"Deposit of {amount} by {user.email}; balance now {user.balance}")
        return user
