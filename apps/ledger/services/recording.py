"""
Guarded ledger writes.

Every write checks the access policy before the store is touched, then
schedules the new-transaction notice for after commit.
"""

import logging
from uuid import UUID

from apps.cards import policy
from apps.cards.services import notify_new_transaction
from apps.ledger.models import Category, Transaction, TransactionType

from .exceptions import TransactionNotFoundError
from .store import create_transaction, get_transaction, remove_transaction

logger = logging.getLogger(__name__)


def record_transaction(
    *,
    card,
    user,
    role,
    amount,
    description: str,
    day,
    month: str,
    year,
    transaction_type: str = TransactionType.EXPENSE,
    category: str = Category.PERSONAL,
    spent_by: str = ''
) -> Transaction:
    """
    Record a single transaction on behalf of ``spent_by``.

    ``spent_by`` defaults to the requester's display name.

    Raises:
        AuthorizationError: If the role may not record for ``spent_by``, or
            a member tries to record a common-category expense
        LedgerValidationError: If the input is malformed
        StoreError: If the write fails
    """
    requester_name = user.get_display_name()
    spent_by = (spent_by or '').strip() or requester_name

    policy.ensure_can_create_transaction(role, requester_name, spent_by)
    if category == Category.COMMON:
        policy.ensure_can_create_common_expense(role)

    txn = create_transaction(
        card=card,
        user=user,
        amount=amount,
        description=description,
        day=day,
        month=month,
        year=year,
        transaction_type=transaction_type,
        category=category,
        spent_by=spent_by,
    )
    notify_new_transaction(txn)
    return txn


def delete_transaction(*, card, user, role, transaction_id: UUID) -> None:
    """
    Delete a transaction from a card.

    Raises:
        TransactionNotFoundError: If the transaction is not on this card
        AuthorizationError: If the role may not delete it
        StoreError: If the delete fails
    """
    txn = get_transaction(card_id=card.id, transaction_id=transaction_id)
    if txn is None:
        raise TransactionNotFoundError(f"Transaction with ID {transaction_id} not found")

    policy.ensure_can_delete_transaction(role, user.get_display_name(), txn)

    if not remove_transaction(txn.id):
        # Already gone: deleting twice is not an error for the caller
        logger.info("Transaction %s was already deleted", txn.id)
