"""
Membership management service.

A card's participants come from two places: explicit ``CardMember`` records
and the legacy ``shared_emails`` allow-list on the card itself. Both are
merged here, records first, so every caller sees the same precedence.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import transaction

from apps.accounts.models import User
from apps.cards import policy
from apps.cards.models import CardMember, CardRole, CreditCard, normalize_email

from .exceptions import (
    CardNotFoundError,
    CannotRemoveOwnerError,
    NotMemberError,
    OwnerCannotLeaveError,
)

logger = logging.getLogger(__name__)

SOURCE_RECORD = 'record'
SOURCE_SHARED_EMAIL = 'shared_email'


@dataclass(frozen=True)
class MembershipEntry:
    user: User
    role: str
    source: str


def merge_memberships(
    records: Iterable[CardMember],
    shared_emails: Iterable[str],
    users_by_email: Dict[str, User],
    owner_id: Optional[UUID] = None,
) -> List[MembershipEntry]:
    """
    Merge membership records with the legacy e-mail allow-list.

    Records come first in the order given. Allow-list e-mails are resolved
    through ``users_by_email`` (keys lower-cased); e-mails with no account
    and users already present are skipped. The owner never appears.
    """
    entries = []
    seen = set()
    if owner_id is not None:
        seen.add(owner_id)

    for record in records:
        if record.user_id in seen:
            continue
        seen.add(record.user_id)
        entries.append(MembershipEntry(user=record.user, role=record.role, source=SOURCE_RECORD))

    for email in shared_emails or []:
        user = users_by_email.get(normalize_email(email))
        if user is None or user.id in seen:
            continue
        seen.add(user.id)
        entries.append(MembershipEntry(user=user, role=CardRole.MEMBER, source=SOURCE_SHARED_EMAIL))

    return entries


def get_card_role(card: CreditCard, user) -> Optional[str]:
    """
    Resolve a user's role on a card.

    Owner, then a membership record, then the shared e-mail allow-list.
    Returns None when the user has no access.
    """
    if user is None or not user.is_authenticated:
        return None
    if card.is_owner(user):
        return CardRole.OWNER
    record = CardMember.objects.filter(credit_card=card, user=user).only('role').first()
    if record is not None:
        return record.role
    if card.has_shared_email(user.email):
        return CardRole.MEMBER
    return None


def get_card_access(*, card_id: UUID, user) -> Tuple[CreditCard, str]:
    """
    Load a card together with the requester's role on it.

    Raises:
        CardNotFoundError: If the card doesn't exist or the user has no
            access to it (the two are indistinguishable to the caller)
    """
    try:
        card = CreditCard.objects.select_related('user').get(id=card_id)
    except CreditCard.DoesNotExist:
        raise CardNotFoundError(f"Card with ID {card_id} not found")

    role = get_card_role(card, user)
    if role is None:
        raise CardNotFoundError(f"Card with ID {card_id} not found")
    return card, role


def _users_by_email(emails: Iterable[str]) -> Dict[str, User]:
    normalized = {normalize_email(email) for email in emails if normalize_email(email)}
    if not normalized:
        return {}
    return {
        normalize_email(user.email): user
        for user in User.objects.filter(email__in=normalized, is_active=True)
    }


def get_card_members(*, card_id: UUID) -> List[MembershipEntry]:
    """
    Get every non-owner participant with an account.

    Raises:
        CardNotFoundError: If card doesn't exist
    """
    try:
        card = CreditCard.objects.get(id=card_id)
    except CreditCard.DoesNotExist:
        raise CardNotFoundError(f"Card with ID {card_id} not found")

    records = (
        CardMember.objects
        .filter(credit_card=card)
        .select_related('user')
        .order_by('joined_at')
    )
    shared_emails = card.shared_emails or []
    return merge_memberships(
        records,
        shared_emails,
        _users_by_email(shared_emails),
        owner_id=card.user_id,
    )


def _revoke_access(card: CreditCard, user: User) -> bool:
    deleted, _ = CardMember.objects.filter(credit_card=card, user=user).delete()

    email = normalize_email(user.email)
    remaining = [
        shared for shared in (card.shared_emails or [])
        if normalize_email(shared) != email
    ]
    dropped_email = len(remaining) != len(card.shared_emails or [])
    if dropped_email:
        card.shared_emails = remaining
        card.save(update_fields=['shared_emails', 'updated_at'])

    return bool(deleted) or dropped_email


@transaction.atomic
def remove_member(*, card_id: UUID, user_id: UUID, removed_by: User) -> None:
    """
    Remove a participant from a card (owner only).

    Deletes the membership record and drops the user's e-mail from the
    legacy allow-list, so the user loses access through either path.

    Raises:
        CardNotFoundError: If card doesn't exist
        AuthorizationError: If removed_by is not the owner
        CannotRemoveOwnerError: If trying to remove the owner
        NotMemberError: If target user is not a participant
    """
    try:
        card = CreditCard.objects.select_for_update().get(id=card_id)
    except CreditCard.DoesNotExist:
        raise CardNotFoundError(f"Card with ID {card_id} not found")

    policy.ensure_can_manage_members(get_card_role(card, removed_by))

    if str(card.user_id) == str(user_id):
        raise CannotRemoveOwnerError("Cannot remove the card owner")

    try:
        user = User.objects.get(id=user_id)
    except (User.DoesNotExist, ValidationError):
        raise NotMemberError("User is not a member of this card")

    if not _revoke_access(card, user):
        raise NotMemberError("User is not a member of this card")

    logger.info("Removed user %s from card %s", user.id, card.id)


@transaction.atomic
def leave_card(*, card_id: UUID, user: User) -> None:
    """
    Leave a card.

    Owner cannot leave their own card; they must delete it instead.

    Raises:
        CardNotFoundError: If card doesn't exist
        OwnerCannotLeaveError: If user is the owner
        NotMemberError: If user is not a participant
    """
    try:
        card = CreditCard.objects.select_for_update().get(id=card_id)
    except CreditCard.DoesNotExist:
        raise CardNotFoundError(f"Card with ID {card_id} not found")

    if card.is_owner(user):
        raise OwnerCannotLeaveError("Card owner cannot leave. Delete the card instead.")

    if not _revoke_access(card, user):
        raise NotMemberError(f"User is not a member of {card.card_name}")

    logger.info("User %s left card %s", user.id, card.id)
