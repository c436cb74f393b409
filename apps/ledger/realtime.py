"""
Change feed for card ledgers.

``post_save`` / ``post_delete`` on ``Transaction`` publish an INSERT or
DELETE event to the subscribers of the affected card once the surrounding
database transaction commits. Subscribers reload what they show from the
store; events carry row snapshots only for logging and display.
"""

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from apps.ledger.models import Transaction
from apps.ledger.services.store import list_transactions

logger = logging.getLogger(__name__)

INSERT = 'INSERT'
DELETE = 'DELETE'
TABLE = Transaction._meta.db_table

_subscribers: Dict[str, List[Callable]] = defaultdict(list)
_lock = threading.Lock()


@dataclass(frozen=True)
class ChangeEvent:
    event_type: str
    table: str
    old: Optional[dict] = None
    new: Optional[dict] = None


def snapshot(txn: Transaction) -> dict:
    return {
        'id': str(txn.id),
        'credit_card_id': str(txn.credit_card_id),
        'amount': str(txn.amount),
        'description': txn.description,
        'day': txn.day,
        'month': txn.month,
        'year': txn.year,
        'transaction_type': txn.transaction_type,
        'category': txn.category,
        'spent_by': txn.spent_by,
        'is_common_split': txn.is_common_split,
    }


def subscribe(card_id, callback: Callable[[ChangeEvent], None]) -> Callable[[], None]:
    """Register ``callback`` for one card; returns the unsubscribe function."""
    key = str(card_id)
    with _lock:
        _subscribers[key].append(callback)

    def unsubscribe():
        with _lock:
            callbacks = _subscribers.get(key, [])
            if callback in callbacks:
                callbacks.remove(callback)
            if not callbacks:
                _subscribers.pop(key, None)

    return unsubscribe


def publish(card_id, event: ChangeEvent) -> None:
    with _lock:
        callbacks = list(_subscribers.get(str(card_id), []))
    for callback in callbacks:
        try:
            callback(event)
        except Exception:
            # One broken subscriber must not starve the others
            logger.exception("Change subscriber for card %s failed", card_id)


def _publish_on_commit(card_id, event: ChangeEvent) -> None:
    transaction.on_commit(lambda: publish(card_id, event))


@receiver(post_save, sender=Transaction, dispatch_uid='ledger_transaction_saved')
def transaction_saved(sender, instance, created, **kwargs):
    if not created:
        return
    _publish_on_commit(
        instance.credit_card_id,
        ChangeEvent(event_type=INSERT, table=TABLE, new=snapshot(instance)),
    )


@receiver(post_delete, sender=Transaction, dispatch_uid='ledger_transaction_deleted')
def transaction_deleted(sender, instance, **kwargs):
    _publish_on_commit(
        instance.credit_card_id,
        ChangeEvent(event_type=DELETE, table=TABLE, old=snapshot(instance)),
    )


class LiveStatement:
    """
    Keeps one card's (month, year) transactions current.

    Any change event on the card triggers a full reload of the period;
    events are never applied as deltas.

    Usage::

        with LiveStatement(card.id, 'March', 2024) as live:
            ...
            live.transactions
    """

    def __init__(self, card_id, month: str, year: int, loader=None):
        self.card_id = card_id
        self.month = month
        self.year = year
        self.transactions = []
        self.refresh_count = 0
        self.last_event = None
        self._loader = loader or list_transactions
        self._unsubscribe = None

    def start(self):
        self.refresh()
        if self._unsubscribe is None:
            self._unsubscribe = subscribe(self.card_id, self.handle_event)
        return self

    def stop(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def refresh(self):
        self.transactions = self._loader(self.card_id, self.month, self.year)
        self.refresh_count += 1

    def handle_event(self, event: ChangeEvent):
        self.last_event = event
        self.refresh()

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False
