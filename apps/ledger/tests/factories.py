"""Helpers shared by the ledger tests."""

from datetime import date
from decimal import Decimal

from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.ledger.models import Category, Transaction, TransactionType, month_number


def client_for(user):
    """Return an API client authenticated as ``user`` via JWT."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


def make_transaction(card, user, spent_by, amount, *, month='March', year=2024, day=1,
                     transaction_type=TransactionType.EXPENSE, is_common_split=False,
                     description='Entry'):
    """Create a stored transaction directly, bypassing the services."""
    return Transaction.objects.create(
        credit_card=card,
        user=user,
        amount=Decimal(amount),
        description=description,
        day=day,
        month=month,
        year=year,
        transaction_date=date(year, month_number(month), day),
        transaction_type=transaction_type,
        category=Category.PERSONAL,
        spent_by=spent_by,
        is_common_split=is_common_split,
    )


def entry(spent_by, amount, transaction_type=TransactionType.EXPENSE, is_common_split=False):
    """Unsaved transaction for pure calculations."""
    return Transaction(
        spent_by=spent_by,
        amount=Decimal(amount),
        transaction_type=transaction_type,
        is_common_split=is_common_split,
    )
