"""
Common-split tests.

Expansion is pure; create_common_expense writes through the store and is
exercised against the test database with injected write failures.
"""

import pytest
from decimal import Decimal
from unittest.mock import patch

from django.db import DatabaseError

from apps.cards.models import CardRole
from apps.cards.services.exceptions import AuthorizationError
from apps.ledger.models import Category, Transaction
from apps.ledger.services import (
    GuestStore,
    LedgerValidationError,
    Person,
    StoreError,
    create_common_expense,
    expand_common_expense,
    resolve_participants,
)


def expand(ids, people, total='90.00', description='Groceries'):
    return expand_common_expense(
        total_amount=Decimal(total),
        description=description,
        day=12,
        participant_ids=ids,
        people=people,
    )


@pytest.fixture
def trio():
    return [
        Person.owner('u1', 'Alice'),
        Person.member('u2', 'Bob'),
        Person.guest('guest-abc', 'Carol'),
    ]


# =============================================================================
# Expansion
# =============================================================================

class TestExpandCommonExpense:

    def test_one_leaf_per_participant(self, trio):
        leaves = expand(['u1', 'u2', 'guest-abc'], trio)

        assert len(leaves) == 3
        assert [leaf.spent_by for leaf in leaves] == ['Alice', 'Bob', 'Carol']
        assert len({leaf.spent_by for leaf in leaves}) == 3

    def test_leaf_shape(self, trio):
        leaf = expand(['u1', 'u2'], trio)[0]

        assert leaf.amount == Decimal('45.00')
        assert leaf.category == Category.PERSONAL
        assert leaf.is_common_split is True
        assert leaf.description == 'Groceries (Common Split)'
        assert leaf.day == 12

    @pytest.mark.parametrize('total,count', [
        ('100.00', 3),
        ('10.00', 3),
        ('0.05', 2),
        ('1234.57', 3),
        ('99.99', 2),
    ])
    def test_rounding_residue_is_bounded(self, total, count):
        people = [Person.member(f'u{i}', f'P{i}') for i in range(count)]

        leaves = expand([p.id for p in people], people, total=total)

        residue = abs(sum(leaf.amount for leaf in leaves) - Decimal(total))
        assert residue < Decimal('0.01') * count

    def test_no_remainder_redistribution(self, trio):
        leaves = expand(['u1', 'u2', 'guest-abc'], trio, total='100.00')

        assert {leaf.amount for leaf in leaves} == {Decimal('33.33')}
        assert sum(leaf.amount for leaf in leaves) == Decimal('99.99')

    def test_single_participant_rejected(self, trio):
        with pytest.raises(LedgerValidationError):
            expand(['u1'], trio)

    def test_duplicate_participant_rejected(self, trio):
        with pytest.raises(LedgerValidationError):
            expand(['u1', 'u1'], trio)

    def test_unknown_participant_rejected(self, trio):
        with pytest.raises(LedgerValidationError, match='nobody'):
            expand(['u1', 'nobody'], trio)

    @pytest.mark.parametrize('total', ['0', '-5.00'])
    def test_non_positive_total_rejected(self, trio, total):
        with pytest.raises(LedgerValidationError):
            expand(['u1', 'u2'], trio, total=total)

    def test_total_too_small_to_split(self, trio):
        with pytest.raises(LedgerValidationError):
            expand(['u1', 'u2', 'guest-abc'], trio, total='0.01')

    def test_blank_description_rejected(self, trio):
        with pytest.raises(LedgerValidationError):
            expand(['u1', 'u2'], trio, description='  ')


# =============================================================================
# Storing a Common Expense
# =============================================================================

def _create(card, user, role, people, ids, total='100.00'):
    return create_common_expense(
        card=card,
        user=user,
        role=role,
        total_amount=Decimal(total),
        description='Dinner',
        day=5,
        month='March',
        year=2024,
        participant_ids=ids,
        people=people,
    )


def _fail_for(name):
    """Make Transaction.objects.create fail for leaves attributed to ``name``."""
    manager = Transaction.objects

    def create(**kwargs):
        if kwargs['spent_by'] == name:
            raise DatabaseError('write rejected')
        return manager.get_queryset().create(**kwargs)

    return patch.object(manager, 'create', side_effect=create)


@pytest.mark.django_db
class TestCreateCommonExpense:

    def test_stores_every_leaf(self, card, card_owner, member_user):
        people = resolve_participants(card.id).people

        result = _create(card, card_owner, CardRole.OWNER, people, [p.id for p in people])

        assert len(result.created) == 2
        assert result.failed == []
        assert result.warning is None
        stored = Transaction.objects.filter(credit_card=card).order_by('spent_by')
        assert [(t.spent_by, t.amount, t.is_common_split, t.user_id) for t in stored] == [
            ('Card Member', Decimal('50.00'), True, card_owner.id),
            ('Card Owner', Decimal('50.00'), True, card_owner.id),
        ]

    def test_leaves_have_distinct_ids_and_delete_independently(self, card, card_owner):
        people = resolve_participants(card.id).people
        result = _create(card, card_owner, CardRole.OWNER, people, [p.id for p in people])

        assert len(set(result.created)) == 2
        Transaction.objects.filter(id=result.created[0]).delete()

        remaining = Transaction.objects.get(id=result.created[1])
        assert remaining.amount == Decimal('50.00')

    def test_member_is_rejected_before_any_write(self, card, member_user):
        people = resolve_participants(card.id).people

        with patch('apps.ledger.services.splitting.create_transaction') as create:
            with pytest.raises(AuthorizationError):
                _create(card, member_user, CardRole.MEMBER, people, [p.id for p in people])

        create.assert_not_called()
        assert not Transaction.objects.exists()

    def test_validation_failure_writes_nothing(self, card, card_owner):
        people = resolve_participants(card.id).people

        with pytest.raises(LedgerValidationError):
            _create(card, card_owner, CardRole.OWNER, people, [people[0].id])

        assert not Transaction.objects.exists()

    def test_partial_failure_keeps_stored_leaves(self, card, card_owner):
        people = resolve_participants(card.id).people

        with _fail_for('Card Member'):
            result = _create(card, card_owner, CardRole.OWNER, people, [p.id for p in people])

        assert len(result.created) == 1
        assert [leaf.spent_by for leaf in result.failed] == ['Card Member']
        assert result.is_partial
        assert result.warning.failed_names == ['Card Member']
        assert list(Transaction.objects.values_list('spent_by', flat=True)) == ['Card Owner']

    def test_total_failure_raises_store_error(self, card, card_owner):
        people = resolve_participants(card.id).people

        with patch.object(Transaction.objects, 'create', side_effect=DatabaseError('down')):
            with pytest.raises(StoreError):
                _create(card, card_owner, CardRole.OWNER, people, [p.id for p in people])

        assert not Transaction.objects.exists()

    def test_invalid_day_writes_nothing(self, card, card_owner):
        people = resolve_participants(card.id).people

        with pytest.raises(LedgerValidationError):
            create_common_expense(
                card=card,
                user=card_owner,
                role=CardRole.OWNER,
                total_amount=Decimal('10.00'),
                description='Dinner',
                day=30,
                month='February',
                year=2024,
                participant_ids=[p.id for p in people],
                people=people,
            )

        assert not Transaction.objects.exists()

    def test_one_notice_for_the_whole_split(
        self, card, card_owner, member_user, mailoutbox, django_capture_on_commit_callbacks
    ):
        store = GuestStore({}, key='guests')
        store.add(card.id, 'Carol')
        people = resolve_participants(card.id, store).people

        with django_capture_on_commit_callbacks(execute=True):
            _create(card, card_owner, CardRole.OWNER, people, [p.id for p in people], total='90.00')

        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == [member_user.email]
        for name in ('Card Owner', 'Card Member', 'Carol'):
            assert name in mailoutbox[0].body

    def test_leaves_stay_distinct_when_a_guest_reuses_an_account_name(self, card, card_owner):
        backing = {'guests': {str(card.id): [{'id': 'guest-1', 'name': 'Card Owner'}]}}
        people = resolve_participants(card.id, GuestStore(backing, key='guests')).people

        with pytest.raises(LedgerValidationError):
            _create(card, card_owner, CardRole.OWNER, people, [str(card_owner.id), 'guest-1'])

        result = _create(card, card_owner, CardRole.OWNER, people, [p.id for p in people])
        spent_by = list(Transaction.objects.values_list('spent_by', flat=True))
        assert len(result.created) == 2
        assert len(set(spent_by)) == len(spent_by)
