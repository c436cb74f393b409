"""
Invitation management service.

Owners invite people by e-mail; the invitee accepts once signed in with
the same address. At most one pending invitation exists per card and
e-mail at any time.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.cards import policy
from apps.cards.models import (
    CardInvitation,
    CardMember,
    CardRole,
    CreditCard,
    InvitationStatus,
    normalize_email,
)

from .exceptions import (
    AlreadyMemberError,
    CardNotFoundError,
    DuplicateInvitationError,
    InvalidInvitationError,
    InvitationExpiredError,
    InvitationNotFoundError,
    NotificationError,
)
from .membership_management import get_card_role
from .notifications import send_invitation_email

logger = logging.getLogger(__name__)


@dataclass
class InvitationResult:
    invitation: CardInvitation
    warning: Optional[str] = None


def _is_participant(card: CreditCard, email: str) -> bool:
    if normalize_email(card.user.email) == email:
        return True
    if card.has_shared_email(email):
        return True
    return CardMember.objects.filter(credit_card=card, user__email__iexact=email).exists()


@transaction.atomic
def _create_pending_invitation(*, card_id: UUID, inviter: User, email: str) -> CardInvitation:
    try:
        card = CreditCard.objects.select_for_update().select_related('user').get(id=card_id)
    except CreditCard.DoesNotExist:
        raise CardNotFoundError(f"Card with ID {card_id} not found")

    policy.ensure_can_manage_members(get_card_role(card, inviter))

    if not email:
        raise InvalidInvitationError("Email is required")
    try:
        validate_email(email)
    except ValidationError:
        raise InvalidInvitationError(f"'{email}' is not a valid email address")

    if email == normalize_email(inviter.email):
        raise InvalidInvitationError("You cannot invite yourself")

    if _is_participant(card, email):
        raise AlreadyMemberError(f"{email} already has access to {card.card_name}")

    pending = CardInvitation.objects.filter(
        credit_card=card,
        invited_email=email,
        status=InvitationStatus.PENDING,
    ).first()
    if pending is not None:
        if not pending.is_expired:
            raise DuplicateInvitationError(
                f"A pending invitation for {email} already exists"
            )
        # Expired invitations make way for a fresh one
        pending.status = InvitationStatus.REVOKED
        pending.save(update_fields=['status', 'updated_at'])

    try:
        with transaction.atomic():
            invitation = CardInvitation.objects.create(
                credit_card=card,
                inviter=inviter,
                invited_email=email,
                role=CardRole.MEMBER,
            )
    except IntegrityError:
        raise DuplicateInvitationError(f"A pending invitation for {email} already exists")

    logger.info("Created invitation %s for card %s", invitation.id, card.id)
    return invitation


def create_invitation(*, card_id: UUID, inviter: User, email: str) -> InvitationResult:
    """
    Invite an e-mail address to a card (owner only).

    The invitation row is committed first, then the e-mail is sent. A failed
    or timed out e-mail leaves the invitation in place and is reported as
    ``InvitationResult.warning``.

    Raises:
        CardNotFoundError: If card doesn't exist
        AuthorizationError: If inviter is not the owner
        InvalidInvitationError: If the e-mail is invalid or the inviter's own
        AlreadyMemberError: If the e-mail already has access
        DuplicateInvitationError: If a pending invitation already exists
    """
    invitation = _create_pending_invitation(
        card_id=card_id,
        inviter=inviter,
        email=normalize_email(email),
    )

    try:
        send_invitation_email(invitation)
    except NotificationError:
        return InvitationResult(
            invitation=invitation,
            warning="Invitation created, but the email could not be sent. Share the link manually.",
        )
    return InvitationResult(invitation=invitation)


@transaction.atomic
def accept_invitation(*, invitation_id: UUID, user: User) -> CardMember:
    """
    Accept a pending invitation addressed to the user's e-mail.

    Raises:
        InvitationNotFoundError: If invitation doesn't exist
        InvalidInvitationError: If it is no longer pending or addressed elsewhere
        InvitationExpiredError: If it has expired
    """
    try:
        invitation = (
            CardInvitation.objects
            .select_for_update()
            .select_related('credit_card')
            .get(id=invitation_id)
        )
    except CardInvitation.DoesNotExist:
        raise InvitationNotFoundError(f"Invitation with ID {invitation_id} not found")

    if invitation.status != InvitationStatus.PENDING:
        raise InvalidInvitationError(f"Invitation is already {invitation.status}")

    if invitation.is_expired:
        raise InvitationExpiredError("Invitation has expired")

    if invitation.invited_email != normalize_email(user.email):
        raise InvalidInvitationError("This invitation was sent to a different email address")

    card = invitation.credit_card
    if card.is_owner(user):
        raise InvalidInvitationError("You already own this card")

    membership, _ = CardMember.objects.get_or_create(
        credit_card=card,
        user=user,
        defaults={'role': invitation.role},
    )

    invitation.status = InvitationStatus.ACCEPTED
    invitation.invited_user = user
    invitation.accepted_at = timezone.now()
    invitation.save(update_fields=['status', 'invited_user', 'accepted_at', 'updated_at'])

    logger.info("User %s accepted invitation %s to card %s", user.id, invitation.id, card.id)
    return membership


@transaction.atomic
def revoke_invitation(*, invitation_id: UUID, user: User) -> CardInvitation:
    """
    Revoke a pending invitation (owner only).

    Raises:
        InvitationNotFoundError: If invitation doesn't exist
        AuthorizationError: If user is not the card owner
        InvalidInvitationError: If it is no longer pending
    """
    try:
        invitation = (
            CardInvitation.objects
            .select_for_update()
            .select_related('credit_card')
            .get(id=invitation_id)
        )
    except CardInvitation.DoesNotExist:
        raise InvitationNotFoundError(f"Invitation with ID {invitation_id} not found")

    policy.ensure_can_manage_members(get_card_role(invitation.credit_card, user))

    if invitation.status != InvitationStatus.PENDING:
        raise InvalidInvitationError(f"Invitation is already {invitation.status}")

    invitation.status = InvitationStatus.REVOKED
    invitation.save(update_fields=['status', 'updated_at'])
    return invitation


def get_pending_invitations(*, card_id: UUID) -> QuerySet[CardInvitation]:
    """
    Raises:
        CardNotFoundError: If card doesn't exist
    """
    if not CreditCard.objects.filter(id=card_id).exists():
        raise CardNotFoundError(f"Card with ID {card_id} not found")

    return (
        CardInvitation.objects
        .filter(credit_card_id=card_id, status=InvitationStatus.PENDING)
        .select_related('inviter')
        .order_by('-invited_at')
    )


def get_my_invitations(*, user: User) -> QuerySet[CardInvitation]:
    """Pending, unexpired invitations addressed to the user's e-mail."""
    return (
        CardInvitation.objects
        .filter(
            invited_email=normalize_email(user.email),
            status=InvitationStatus.PENDING,
            expires_at__gt=timezone.now(),
        )
        .select_related('credit_card', 'inviter')
        .order_by('-invited_at')
    )
