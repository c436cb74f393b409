from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .models import CardRole
from .policy import can_manage_members
from .serializers import (
    CreditCardSerializer,
    CreditCardCreateSerializer,
    CreditCardUpdateSerializer,
    CardMemberSerializer,
    CardMembershipSerializer,
    CardInvitationSerializer,
    CreateInvitationSerializer,
    RemoveMemberSerializer,
)

from apps.cards.services import (
    create_card,
    update_card,
    delete_card,
    get_user_cards,
    get_card_access,
    get_card_members,
    remove_member,
    leave_card,
    create_invitation,
    accept_invitation,
    revoke_invitation,
    get_pending_invitations,
    get_my_invitations,
    # Exceptions
    AuthorizationError,
    CardNotFoundError,
    InvalidCardDataError,
    NotMemberError,
    OwnerCannotLeaveError,
    CannotRemoveOwnerError,
    InvitationNotFoundError,
    InvalidInvitationError,
)


class CreditCardViewSet(viewsets.ViewSet):
    """
    ViewSet for CreditCard CRUD operations.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Get all cards the user owns or shares
    create: Create a new card
    retrieve: Get a specific card (participants only)
    partial_update: Update card metadata (owner only)
    destroy: Delete a card (owner only)
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = '[0-9a-fA-F-]{36}'

    def list(self, request):
        """Get every card the user can see."""
        cards = get_user_cards(user=request.user)
        serializer = CreditCardSerializer(cards, many=True, context={'request': request})
        return Response(serializer.data)

    @extend_schema(request=CreditCardCreateSerializer, responses={201: CreditCardSerializer})
    def create(self, request):
        """Create a new card."""
        serializer = CreditCardCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            card = create_card(owner=request.user, **serializer.validated_data)
        except InvalidCardDataError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        card.user_role = CardRole.OWNER
        output_serializer = CreditCardSerializer(card, context={'request': request})
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        """Get a card the user participates in."""
        try:
            card, role = get_card_access(card_id=pk, user=request.user)
        except CardNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        card.user_role = role
        serializer = CreditCardSerializer(card, context={'request': request})
        return Response(serializer.data)

    @extend_schema(request=CreditCardUpdateSerializer, responses={200: CreditCardSerializer})
    def partial_update(self, request, pk=None):
        """Update card metadata (owner only)."""
        serializer = CreditCardUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            get_card_access(card_id=pk, user=request.user)
            card = update_card(card_id=pk, user=request.user, **serializer.validated_data)
        except CardNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except AuthorizationError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except InvalidCardDataError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        output_serializer = CreditCardSerializer(card, context={'request': request})
        return Response(output_serializer.data)

    def destroy(self, request, pk=None):
        """Delete a card (owner only)."""
        try:
            get_card_access(card_id=pk, user=request.user)
            delete_card(card_id=pk, user=request.user)
            return Response(status=status.HTTP_204_NO_CONTENT)
        except CardNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except AuthorizationError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    @action(detail=True, methods=['get'])
    def members(self, request, pk=None):
        """Get all members of the card (records and shared e-mails merged)."""
        try:
            get_card_access(card_id=pk, user=request.user)
            entries = get_card_members(card_id=pk)
        except CardNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        serializer = CardMemberSerializer(entries, many=True)
        return Response(serializer.data)

    @extend_schema(request=CreateInvitationSerializer, responses={201: CardInvitationSerializer})
    @action(detail=True, methods=['get', 'post'])
    def invitations(self, request, pk=None):
        """List pending invitations or invite an e-mail (owner only)."""
        try:
            card, role = get_card_access(card_id=pk, user=request.user)
        except CardNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        if request.method == 'GET':
            if not can_manage_members(role):
                return Response(
                    {'error': "You don't have permission to manage members of this card"},
                    status=status.HTTP_403_FORBIDDEN
                )
            invitations = get_pending_invitations(card_id=card.id)
            serializer = CardInvitationSerializer(invitations, many=True)
            return Response(serializer.data)

        serializer = CreateInvitationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = create_invitation(
                card_id=card.id,
                inviter=request.user,
                email=serializer.validated_data['email']
            )
        except AuthorizationError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except InvalidInvitationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        data = CardInvitationSerializer(result.invitation).data
        if result.warning:
            data['warning'] = result.warning
        return Response(data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def leave(self, request, pk=None):
        """Leave a card."""
        try:
            leave_card(card_id=pk, user=request.user)
            return Response(status=status.HTTP_204_NO_CONTENT)
        except CardNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except (OwnerCannotLeaveError, NotMemberError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    @extend_schema(request=RemoveMemberSerializer)
    @action(detail=True, methods=['delete'])
    def remove_member(self, request, pk=None):
        """Remove a member from the card (owner only)."""
        serializer = RemoveMemberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            get_card_access(card_id=pk, user=request.user)
            remove_member(
                card_id=pk,
                user_id=serializer.validated_data['user_id'],
                removed_by=request.user
            )
            return Response(status=status.HTTP_204_NO_CONTENT)
        except CardNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except AuthorizationError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except (CannotRemoveOwnerError, NotMemberError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


@extend_schema(
    responses={200: CardInvitationSerializer(many=True)},
    description="Get pending invitations addressed to the current user.",
    tags=['cards'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_invitations(request):
    """Get pending invitations for the current user."""
    invitations = get_my_invitations(user=request.user)
    serializer = CardInvitationSerializer(invitations, many=True)
    return Response(serializer.data)


@extend_schema(
    request=None,
    responses={200: CardMembershipSerializer},
    description="Accept an invitation and join the card.",
    tags=['cards'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def accept_invitation_view(request, invitation_id):
    """Accept an invitation addressed to the current user."""
    try:
        membership = accept_invitation(invitation_id=invitation_id, user=request.user)
    except InvitationNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except InvalidInvitationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    serializer = CardMembershipSerializer(membership)
    return Response(serializer.data)


@extend_schema(
    request=None,
    responses={200: CardInvitationSerializer},
    description="Revoke a pending invitation (card owner only).",
    tags=['cards'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def revoke_invitation_view(request, invitation_id):
    """Revoke a pending invitation."""
    try:
        invitation = revoke_invitation(invitation_id=invitation_id, user=request.user)
    except InvitationNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except AuthorizationError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    except InvalidInvitationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    serializer = CardInvitationSerializer(invitation)
    return Response(serializer.data)
