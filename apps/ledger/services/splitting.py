"""
Common-split expansion.

A common expense is never stored as one row. It is expanded into one
personal leaf per participant, each carrying ``is_common_split=True`` and
an equal share of the total. Shares are rounded to the cent and the
remainder is not redistributed, so the stored leaves may differ from the
entered total by less than one cent per participant.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional
from uuid import UUID

from apps.cards import policy
from apps.cards.services import notify_new_transactions
from apps.ledger.models import Category, TransactionType

from .exceptions import LedgerValidationError, PartialExpansionWarning, StoreError
from .people import Person
from .store import CENT, create_transaction, to_amount, transaction_date

logger = logging.getLogger(__name__)

COMMON_SPLIT_SUFFIX = ' (Common Split)'
MIN_PARTICIPANTS = 2


@dataclass(frozen=True)
class LeafTransaction:
    participant_id: str
    spent_by: str
    amount: Decimal
    description: str
    day: int
    transaction_type: str = TransactionType.EXPENSE
    category: str = Category.PERSONAL
    is_common_split: bool = True


@dataclass
class SplitResult:
    created: List[UUID] = field(default_factory=list)
    failed: List[LeafTransaction] = field(default_factory=list)
    warning: Optional[PartialExpansionWarning] = None

    @property
    def is_partial(self) -> bool:
        return bool(self.created) and bool(self.failed)


def split_amount(total: Decimal, parts: int) -> Decimal:
    """Equal share of ``total`` rounded half-up to the cent."""
    return (total / parts).quantize(CENT, rounding=ROUND_HALF_UP)


def expand_common_expense(
    *,
    total_amount,
    description: str,
    day: int,
    participant_ids: Iterable[str],
    people: Iterable[Person]
) -> List[LeafTransaction]:
    """
    Expand a common expense into one leaf per participant.

    Leaves come out in the order of ``participant_ids``. Nothing is stored.

    Raises:
        LedgerValidationError: On fewer than two participants, a repeated or
            unknown participant id, a blank description, or a non-positive
            total
    """
    total = to_amount(total_amount)

    description = (description or '').strip()
    if not description:
        raise LedgerValidationError("Description is required")

    ids = [str(pid) for pid in participant_ids]
    if len(ids) < MIN_PARTICIPANTS:
        raise LedgerValidationError("Select at least two participants to split an expense")
    if len(set(ids)) != len(ids):
        raise LedgerValidationError("Each participant can only be selected once")

    people_by_id = {person.id: person for person in people}
    unknown = [pid for pid in ids if pid not in people_by_id]
    if unknown:
        raise LedgerValidationError(f"Unknown participants: {', '.join(unknown)}")

    share = split_amount(total, len(ids))
    if share <= 0:
        raise LedgerValidationError("Amount is too small to split between that many participants")

    leaf_description = f"{description}{COMMON_SPLIT_SUFFIX}"
    return [
        LeafTransaction(
            participant_id=pid,
            spent_by=people_by_id[pid].name,
            amount=share,
            description=leaf_description,
            day=day,
        )
        for pid in ids
    ]


def create_common_expense(
    *,
    card,
    user,
    role,
    total_amount,
    description: str,
    day,
    month: str,
    year,
    participant_ids: Iterable[str],
    people: Iterable[Person]
) -> SplitResult:
    """
    Expand and store a common expense (owner only).

    Each leaf is stored independently; a failed leaf does not roll back the
    others. One notice covering every stored leaf goes out after commit.

    Returns:
        SplitResult with the created ids, the failed leaves and, when some
        but not all leaves failed, a ``PartialExpansionWarning``

    Raises:
        AuthorizationError: If the role may not create common expenses
        LedgerValidationError: If the input is malformed (nothing is stored)
        StoreError: If no leaf could be stored
    """
    policy.ensure_can_create_common_expense(role)

    leaves = expand_common_expense(
        total_amount=total_amount,
        description=description,
        day=day,
        participant_ids=participant_ids,
        people=people,
    )
    transaction_date(day, month, year)

    result = SplitResult()
    stored = []
    for leaf in leaves:
        try:
            txn = create_transaction(
                card=card,
                user=user,
                amount=leaf.amount,
                description=leaf.description,
                day=leaf.day,
                month=month,
                year=year,
                transaction_type=leaf.transaction_type,
                category=leaf.category,
                spent_by=leaf.spent_by,
                is_common_split=leaf.is_common_split,
            )
        except StoreError:
            result.failed.append(leaf)
            continue
        result.created.append(txn.id)
        stored.append(txn)

    if result.failed and not result.created:
        raise StoreError("Could not save the common expense. Please try again.")

    notify_new_transactions(stored)

    if result.failed:
        result.warning = PartialExpansionWarning(leaf.spent_by for leaf in result.failed)
        logger.warning(
            "Common expense on card %s partly stored: %d of %d leaves failed",
            card.id, len(result.failed), len(leaves),
        )

    return result
