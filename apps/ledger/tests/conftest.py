import pytest
from apps.accounts.models import User
from apps.cards.models import CreditCard, CardMember, CardRole
from apps.ledger.services import Person

from .factories import client_for


@pytest.fixture
def alice_and_bob():
    """The two-person card used throughout the examples."""
    return [Person.owner('u1', 'Alice'), Person.member('u2', 'Bob')]


@pytest.fixture
def card_owner(db):
    return User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        full_name='Card Owner',
    )


@pytest.fixture
def member_user(db):
    return User.objects.create_user(
        email='member@example.com',
        password='TestPass123!',
        full_name='Card Member',
    )


@pytest.fixture
def other_user(db):
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        full_name='Other User',
    )


@pytest.fixture
def card(card_owner, member_user):
    """Card owned by card_owner with member_user as a member."""
    card = CreditCard.objects.create(
        user=card_owner,
        card_name='Family Visa',
        last_four_digits='4242',
        is_primary=True,
    )
    CardMember.objects.create(credit_card=card, user=member_user, role=CardRole.MEMBER)
    return card


@pytest.fixture
def owner_client(card_owner):
    return client_for(card_owner)


@pytest.fixture
def member_client(member_user):
    return client_for(member_user)


@pytest.fixture
def other_client(other_user):
    return client_for(other_user)
