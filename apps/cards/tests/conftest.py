import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.cards.models import CreditCard, CardMember, CardRole


def client_for(user):
    """Return an API client authenticated as ``user`` via JWT."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def card_owner(db):
    """Create and return a test user (card owner)."""
    return User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        full_name='Card Owner',
    )


@pytest.fixture
def member_user(db):
    """Create and return a member user."""
    return User.objects.create_user(
        email='member@example.com',
        password='TestPass123!',
        full_name='Card Member',
    )


@pytest.fixture
def shared_user(db):
    """Create and return a user with access through the e-mail allow-list."""
    return User.objects.create_user(
        email='shared@example.com',
        password='TestPass123!',
        full_name='Shared User',
    )


@pytest.fixture
def other_user(db):
    """Create and return a user with no access to any card."""
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        full_name='Other User',
    )


@pytest.fixture
def card(card_owner):
    """Create a card owned by card_owner."""
    return CreditCard.objects.create(
        user=card_owner,
        card_name='Family Visa',
        last_four_digits='4242',
        issuing_bank='Test Bank',
        is_primary=True,
    )


@pytest.fixture
def card_with_member(card, member_user):
    """Card with one membership record."""
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
