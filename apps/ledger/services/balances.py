"""
Balance calculation.

Pure functions over already-loaded participants and transactions; nothing
here touches the database. A transaction belongs to a person when its
``spent_by`` equals the person's name (see ``attributed_to``).
Payments are reported next to what each person owes but never subtracted.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List

from apps.ledger.models import TransactionType

from .people import Person

ZERO = Decimal('0.00')


@dataclass(frozen=True)
class PersonBalance:
    person: Person
    personal_expenses: Decimal = ZERO
    common_expenses: Decimal = ZERO
    total_owed: Decimal = ZERO
    payments: Decimal = ZERO


@dataclass
class BalanceSummary:
    balances: List[PersonBalance] = field(default_factory=list)
    personal_expenses: Decimal = ZERO
    common_expenses: Decimal = ZERO
    total_owed: Decimal = ZERO
    payments: Decimal = ZERO
    transaction_count: int = 0
    unmatched: list = field(default_factory=list)


def attributed_to(txn, person: Person) -> bool:
    return txn.spent_by == person.name


def _is_personal_expense(txn) -> bool:
    return txn.transaction_type == TransactionType.EXPENSE and not txn.is_common_split


def _is_common_expense(txn) -> bool:
    return bool(txn.is_common_split)


def _is_payment(txn) -> bool:
    return txn.transaction_type == TransactionType.PAYMENT


def _balance_for(person: Person, transactions) -> PersonBalance:
    personal = common = payments = ZERO
    for txn in transactions:
        if not attributed_to(txn, person):
            continue
        if _is_personal_expense(txn):
            personal += txn.amount
        if _is_common_expense(txn):
            common += txn.amount
        if _is_payment(txn):
            payments += txn.amount
    return PersonBalance(
        person=person,
        personal_expenses=personal,
        common_expenses=common,
        total_owed=personal + common,
        payments=payments,
    )


def compute_balances(people: Iterable[Person], transactions: Iterable) -> List[PersonBalance]:
    """One balance per person, in the order of ``people``."""
    transactions = list(transactions)
    return [_balance_for(person, transactions) for person in people]


def summarize_balances(people: Iterable[Person], transactions: Iterable) -> BalanceSummary:
    """
    Per-person balances plus card totals for one period.

    Each total is the sum of the matching per-person column. Transactions
    matching nobody are listed in ``unmatched`` and excluded from every total.
    """
    people = list(people)
    transactions = list(transactions)
    balances = compute_balances(people, transactions)

    summary = BalanceSummary(
        balances=balances,
        personal_expenses=sum((b.personal_expenses for b in balances), ZERO),
        common_expenses=sum((b.common_expenses for b in balances), ZERO),
        total_owed=sum((b.total_owed for b in balances), ZERO),
        payments=sum((b.payments for b in balances), ZERO),
        transaction_count=len(transactions),
    )
    summary.unmatched = [
        txn for txn in transactions
        if not any(attributed_to(txn, person) for person in people)
    ]
    return summary
