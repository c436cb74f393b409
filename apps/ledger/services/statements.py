"""
Monthly statement assembly.

Loads participants and the period's transactions once, then hands them to
the balance calculator.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .balances import BalanceSummary, summarize_balances
from .people import GuestStore, ParticipantList, resolve_participants
from .store import list_transactions, validate_period


@dataclass
class Statement:
    card: object
    month: str
    year: int
    participants: ParticipantList
    summary: BalanceSummary
    transactions: list = field(default_factory=list)

    @property
    def warnings(self) -> List[str]:
        return self.participants.warnings


def build_statement(*, card, month: str, year, guest_store: Optional[GuestStore] = None) -> Statement:
    """
    Raises:
        LedgerValidationError: If the period is malformed
        StoreError: If transactions cannot be loaded
    """
    year = validate_period(month, year)
    participants = resolve_participants(card.id, guest_store)
    transactions = list_transactions(card.id, month, year)
    return Statement(
        card=card,
        month=month,
        year=year,
        participants=participants,
        summary=summarize_balances(participants.people, transactions),
        transactions=transactions,
    )
