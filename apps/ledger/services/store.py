"""
Transaction store.

The only module that reads or writes ``Transaction`` rows. Input is
validated before any query runs; database failures surface as
``StoreError`` with the raw error logged, never returned.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional
from uuid import UUID

from django.db import DatabaseError, transaction
from django.db.models import Count, Max

from apps.ledger.models import (
    MONTH_NAMES,
    Category,
    Transaction,
    TransactionType,
    month_number,
)

from .exceptions import LedgerValidationError, StoreError

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
MAX_AMOUNT = Decimal('9999999999.99')


def to_amount(value) -> Decimal:
    """Parse a money value into a positive Decimal rounded to one cent."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise LedgerValidationError(f"'{value}' is not a valid amount")
    if not amount.is_finite():
        raise LedgerValidationError(f"'{value}' is not a valid amount")

    amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    if amount <= 0:
        raise LedgerValidationError("Amount must be greater than zero")
    if amount > MAX_AMOUNT:
        raise LedgerValidationError("Amount is too large")
    return amount


def validate_period(month, year) -> int:
    """Validate a statement period; returns the year as int."""
    if month not in MONTH_NAMES:
        raise LedgerValidationError(f"'{month}' is not a valid month")
    try:
        year = int(year)
    except (TypeError, ValueError):
        raise LedgerValidationError(f"'{year}' is not a valid year")
    if not 1 <= year <= 9999:
        raise LedgerValidationError(f"'{year}' is not a valid year")
    return year


def transaction_date(day, month, year) -> date:
    """Date for (day, month name, year); the day must exist in that month."""
    year = validate_period(month, year)
    try:
        day = int(day)
    except (TypeError, ValueError):
        raise LedgerValidationError(f"'{day}' is not a valid day")

    month_no = month_number(month)
    days_in_month = calendar.monthrange(year, month_no)[1]
    if not 1 <= day <= days_in_month:
        raise LedgerValidationError(f"{month} {year} has no day {day}")
    return date(year, month_no, day)


def list_transactions(card_id, month, year) -> List[Transaction]:
    """
    Every transaction of one card in one (month, year), newest first.

    Raises:
        LedgerValidationError: If the period is malformed
        StoreError: If the query fails
    """
    year = validate_period(month, year)
    try:
        return list(
            Transaction.objects
            .filter(credit_card_id=card_id, month=month, year=year)
            .order_by('-transaction_date', '-created_at')
        )
    except DatabaseError as e:
        logger.error("Listing transactions for card %s failed: %s", card_id, e)
        raise StoreError("Could not load transactions. Please try again.") from e


def create_transaction(
    *,
    card,
    user,
    amount,
    description: str,
    day,
    month: str,
    year,
    transaction_type: str = TransactionType.EXPENSE,
    category: str = Category.PERSONAL,
    spent_by: str,
    is_common_split: bool = False
) -> Transaction:
    """
    Store one transaction and return the stored row.

    Raises:
        LedgerValidationError: If any field is malformed (nothing is written)
        StoreError: If the write fails (nothing is persisted)
    """
    amount = to_amount(amount)
    txn_date = transaction_date(day, month, year)

    description = (description or '').strip()
    if not description:
        raise LedgerValidationError("Description is required")
    if len(description) > 255:
        raise LedgerValidationError("Description must be at most 255 characters")

    spent_by = (spent_by or '').strip()
    if not spent_by:
        raise LedgerValidationError("spent_by is required")

    if transaction_type not in TransactionType.values:
        raise LedgerValidationError(f"'{transaction_type}' is not a valid transaction type")
    if category not in Category.values:
        raise LedgerValidationError(f"'{category}' is not a valid category")

    try:
        with transaction.atomic():
            txn = Transaction.objects.create(
                credit_card=card,
                user=user,
                amount=amount,
                description=description,
                day=txn_date.day,
                month=month,
                year=txn_date.year,
                transaction_date=txn_date,
                transaction_type=transaction_type,
                category=category,
                spent_by=spent_by,
                is_common_split=is_common_split,
            )
    except DatabaseError as e:
        logger.error(
            "Storing transaction on card %s for %s failed: %s",
            getattr(card, 'id', card), spent_by, e,
        )
        raise StoreError("Could not save the transaction. Please try again.") from e

    logger.debug("Stored transaction %s on card %s", txn.id, txn.credit_card_id)
    return txn


def append_transaction(**fields) -> UUID:
    """
    Store one transaction and return its id.

    Accepts the same keyword arguments as ``create_transaction``.
    """
    return create_transaction(**fields).id


def get_transaction(*, card_id, transaction_id) -> Optional[Transaction]:
    """The transaction if it exists on the card, else None."""
    try:
        return Transaction.objects.filter(credit_card_id=card_id, id=transaction_id).first()
    except DatabaseError as e:
        logger.error("Loading transaction %s failed: %s", transaction_id, e)
        raise StoreError("Could not load the transaction. Please try again.") from e


def remove_transaction(transaction_id) -> bool:
    """
    Delete a transaction by id.

    Returns False when the id no longer exists.

    Raises:
        StoreError: If the delete fails
    """
    try:
        with transaction.atomic():
            deleted, _ = Transaction.objects.filter(id=transaction_id).delete()
    except DatabaseError as e:
        logger.error("Deleting transaction %s failed: %s", transaction_id, e)
        raise StoreError("Could not delete the transaction. Please try again.") from e
    return deleted > 0


@dataclass(frozen=True)
class ChangeToken:
    count: int
    latest_created_at: Optional[object]

    @property
    def token(self) -> str:
        latest = self.latest_created_at.isoformat() if self.latest_created_at else ''
        return f"{self.count}:{latest}"


def get_change_token(card_id) -> ChangeToken:
    """
    Cheap fingerprint of a card's ledger for polling clients.

    Raises:
        StoreError: If the query fails
    """
    try:
        stats = (
            Transaction.objects
            .filter(credit_card_id=card_id)
            .aggregate(count=Count('id'), latest=Max('created_at'))
        )
    except DatabaseError as e:
        logger.error("Change token for card %s failed: %s", card_id, e)
        raise StoreError("Could not check for changes. Please try again.") from e
    return ChangeToken(count=stats['count'], latest_created_at=stats['latest'])
