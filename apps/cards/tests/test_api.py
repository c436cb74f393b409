import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIRequestFactory

from apps.cards.models import CardInvitation, CardMember, CreditCard, InvitationStatus
from apps.cards.permissions import IsCardOwner, IsCardParticipant


# =============================================================================
# Card CRUD
# =============================================================================

@pytest.mark.django_db
class TestCardCRUD:
    """Tests for /api/cards/"""

    def test_requires_authentication(self, api_client):
        response = api_client.get(reverse('cards:card-list'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_create_card(self, owner_client):
        response = owner_client.post(reverse('cards:card-list'), {
            'card_name': 'Household',
            'last_four_digits': '1234',
            'issuing_bank': 'Bank',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['card_name'] == 'Household'
        assert response.data['is_primary'] is True
        assert response.data['user_role'] == 'owner'

    def test_create_card_rejects_bad_digits(self, owner_client):
        response = owner_client.post(reverse('cards:card-list'), {
            'card_name': 'Household',
            'last_four_digits': '12a4',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_includes_shared_cards(self, member_client, card_with_member):
        response = member_client.get(reverse('cards:card-list'))

        assert response.status_code == status.HTTP_200_OK
        assert [c['id'] for c in response.data] == [str(card_with_member.id)]
        assert response.data[0]['user_role'] == 'member'

    def test_outsider_gets_404(self, other_client, card):
        response = other_client.get(reverse('cards:card-detail', args=[card.id]))
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_member_cannot_rename(self, member_client, card_with_member):
        response = member_client.patch(
            reverse('cards:card-detail', args=[card_with_member.id]),
            {'card_name': 'Mine now'},
            format='json',
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_owner_renames(self, owner_client, card):
        response = owner_client.patch(
            reverse('cards:card-detail', args=[card.id]),
            {'card_name': 'Renamed'},
            format='json',
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.data['card_name'] == 'Renamed'

    def test_owner_deletes(self, owner_client, card):
        response = owner_client.delete(reverse('cards:card-detail', args=[card.id]))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not CreditCard.objects.filter(id=card.id).exists()


# =============================================================================
# Members
# =============================================================================

@pytest.mark.django_db
class TestMembersAPI:

    def test_list_members(self, member_client, card_with_member, member_user):
        response = member_client.get(reverse('cards:card-members', args=[card_with_member.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['user']['id'] == str(member_user.id)
        assert response.data[0]['source'] == 'record'

    def test_remove_member(self, owner_client, card_with_member, member_user):
        response = owner_client.delete(
            reverse('cards:card-remove-member', args=[card_with_member.id]),
            {'user_id': str(member_user.id)},
            format='json',
        )

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not CardMember.objects.filter(user=member_user).exists()

    def test_member_cannot_remove(self, member_client, card_with_member, card_owner):
        response = member_client.delete(
            reverse('cards:card-remove-member', args=[card_with_member.id]),
            {'user_id': str(card_owner.id)},
            format='json',
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_leave(self, member_client, card_with_member):
        response = member_client.post(reverse('cards:card-leave', args=[card_with_member.id]))
        assert response.status_code == status.HTTP_204_NO_CONTENT

    def test_owner_cannot_leave(self, owner_client, card):
        response = owner_client.post(reverse('cards:card-leave', args=[card.id]))
        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Invitations
# =============================================================================

@pytest.mark.django_db
class TestInvitationsAPI:

    def test_invite_and_accept(self, owner_client, other_client, card, other_user, mailoutbox):
        response = owner_client.post(
            reverse('cards:card-invitations', args=[card.id]),
            {'email': 'other@example.com'},
            format='json',
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert 'warning' not in response.data
        assert len(mailoutbox) == 1

        mine = other_client.get(reverse('cards:my-invitations'))
        assert [i['id'] for i in mine.data] == [response.data['id']]

        accepted = other_client.post(reverse('cards:accept-invitation', args=[response.data['id']]))
        assert accepted.status_code == status.HTTP_200_OK
        assert CardMember.objects.filter(credit_card=card, user=other_user).exists()

    def test_duplicate_invite_is_400(self, owner_client, card):
        url = reverse('cards:card-invitations', args=[card.id])
        owner_client.post(url, {'email': 'new@example.com'}, format='json')

        response = owner_client.post(url, {'email': 'new@example.com'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert CardInvitation.objects.filter(invited_email='new@example.com').count() == 1

    def test_member_cannot_invite_or_list(self, member_client, card_with_member):
        url = reverse('cards:card-invitations', args=[card_with_member.id])

        assert member_client.post(url, {'email': 'x@example.com'}, format='json').status_code == 403
        assert member_client.get(url).status_code == 403

    def test_revoke(self, owner_client, card):
        created = owner_client.post(
            reverse('cards:card-invitations', args=[card.id]),
            {'email': 'new@example.com'},
            format='json',
        )

        response = owner_client.post(reverse('cards:revoke-invitation', args=[created.data['id']]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == InvitationStatus.REVOKED


# =============================================================================
# Permission Classes
# =============================================================================

@pytest.mark.django_db
class TestPermissionClasses:

    def _request(self, user):
        request = APIRequestFactory().get('/')
        request.user = user
        return request

    def test_participant(self, card_with_member, card_owner, member_user, other_user):
        permission = IsCardParticipant()

        assert permission.has_object_permission(self._request(card_owner), None, card_with_member)
        assert permission.has_object_permission(self._request(member_user), None, card_with_member)
        assert not permission.has_object_permission(self._request(other_user), None, card_with_member)

    def test_owner(self, card_with_member, card_owner, member_user):
        permission = IsCardOwner()

        assert permission.has_object_permission(self._request(card_owner), None, card_with_member)
        assert not permission.has_object_permission(self._request(member_user), None, card_with_member)
