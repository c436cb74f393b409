import pytest
from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4

from apps.cards.models import CardRole
from apps.cards.services.exceptions import AuthorizationError
from apps.ledger.models import Category, Transaction
from apps.ledger.services import (
    TransactionNotFoundError,
    delete_transaction,
    record_transaction,
)

from .factories import make_transaction


def _record(card, user, role, **overrides):
    fields = dict(
        card=card,
        user=user,
        role=role,
        amount=Decimal('8.00'),
        description='Lunch',
        day=4,
        month='March',
        year=2024,
    )
    fields.update(overrides)
    return record_transaction(**fields)


@pytest.mark.django_db
class TestRecordTransaction:

    def test_defaults_to_requester_name(self, card, member_user):
        txn = _record(card, member_user, CardRole.MEMBER)

        assert txn.spent_by == 'Card Member'
        assert txn.user == member_user

    def test_owner_records_for_anyone(self, card, card_owner):
        txn = _record(card, card_owner, CardRole.OWNER, spent_by='Carol')
        assert txn.spent_by == 'Carol'

    def test_member_cannot_record_for_others(self, card, member_user):
        with patch('apps.ledger.services.recording.create_transaction') as create:
            with pytest.raises(AuthorizationError):
                _record(card, member_user, CardRole.MEMBER, spent_by='Card Owner')

        create.assert_not_called()

    def test_member_cannot_record_common_category(self, card, member_user):
        with pytest.raises(AuthorizationError):
            _record(card, member_user, CardRole.MEMBER, category=Category.COMMON)

        assert not Transaction.objects.exists()

    def test_notice_scheduled_after_commit(self, card, member_user, card_owner, mailoutbox,
                                           django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            _record(card, member_user, CardRole.MEMBER)

        assert [m.to for m in mailoutbox] == [[card_owner.email]]


@pytest.mark.django_db
class TestDeleteTransaction:

    def test_member_deletes_own(self, card, card_owner, member_user):
        txn = make_transaction(card, card_owner, 'Card Member', '1.00')

        delete_transaction(card=card, user=member_user, role=CardRole.MEMBER, transaction_id=txn.id)

        assert not Transaction.objects.filter(id=txn.id).exists()

    def test_member_cannot_delete_others(self, card, card_owner, member_user):
        txn = make_transaction(card, card_owner, 'Card Owner', '1.00')

        with patch('apps.ledger.services.recording.remove_transaction') as remove:
            with pytest.raises(AuthorizationError):
                delete_transaction(card=card, user=member_user, role=CardRole.MEMBER, transaction_id=txn.id)

        remove.assert_not_called()

    def test_owner_deletes_any(self, card, card_owner):
        txn = make_transaction(card, card_owner, 'Someone Else', '1.00')

        delete_transaction(card=card, user=card_owner, role=CardRole.OWNER, transaction_id=txn.id)

        assert not Transaction.objects.exists()

    def test_unknown_transaction(self, card, card_owner):
        with pytest.raises(TransactionNotFoundError):
            delete_transaction(card=card, user=card_owner, role=CardRole.OWNER, transaction_id=uuid4())
