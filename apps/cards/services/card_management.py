"""
Card management service.

Handles credit card CRUD operations with proper transaction safety.
"""

import logging
import re
from typing import List, Optional
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.cards import policy
from apps.cards.models import CardMember, CardRole, CreditCard, normalize_email

from .exceptions import CardNotFoundError, InvalidCardDataError
from .membership_management import get_card_role

logger = logging.getLogger(__name__)

LAST_FOUR_PATTERN = re.compile(r'^\d{4}$')
UPDATABLE_FIELDS = ('card_name', 'last_four_digits', 'issuing_bank', 'card_type')


def _clean_card_name(card_name: Optional[str]) -> str:
    card_name = (card_name or '').strip()
    if not card_name:
        raise InvalidCardDataError("Card name is required")
    if len(card_name) > 100:
        raise InvalidCardDataError("Card name must be at most 100 characters")
    return card_name


def _clean_last_four(last_four_digits: Optional[str]) -> str:
    last_four_digits = (last_four_digits or '').strip()
    if not LAST_FOUR_PATTERN.match(last_four_digits):
        raise InvalidCardDataError("Last four digits must be exactly 4 digits")
    return last_four_digits


@transaction.atomic
def create_card(
    *,
    owner: User,
    card_name: str,
    last_four_digits: str,
    issuing_bank: str = '',
    card_type: str = ''
) -> CreditCard:
    """
    Create a new card owned by ``owner``.

    The first card a user owns becomes their primary card.

    Raises:
        InvalidCardDataError: If the name or digits are invalid
    """
    card_name = _clean_card_name(card_name)
    last_four_digits = _clean_last_four(last_four_digits)

    # Lock the owner's cards so two concurrent creates can't both be primary
    has_cards = (
        CreditCard.objects
        .select_for_update()
        .filter(user=owner)
        .exists()
    )

    card = CreditCard.objects.create(
        user=owner,
        card_name=card_name,
        last_four_digits=last_four_digits,
        issuing_bank=(issuing_bank or '').strip(),
        card_type=(card_type or '').strip(),
        is_primary=not has_cards,
    )
    logger.info("Created card %s for user %s", card.id, owner.id)
    return card


def get_card_by_id(*, card_id: UUID) -> CreditCard:
    """
    Raises:
        CardNotFoundError: If card doesn't exist
    """
    try:
        return CreditCard.objects.select_related('user').get(id=card_id)
    except CreditCard.DoesNotExist:
        raise CardNotFoundError(f"Card with ID {card_id} not found")


@transaction.atomic
def update_card(*, card_id: UUID, user: User, **fields) -> CreditCard:
    """
    Update card metadata (owner only).

    Only ``card_name``, ``last_four_digits``, ``issuing_bank`` and
    ``card_type`` may change; other keys are ignored.

    Raises:
        CardNotFoundError: If card doesn't exist
        AuthorizationError: If user is not the owner
        InvalidCardDataError: If a new value is invalid
    """
    try:
        card = CreditCard.objects.select_for_update().get(id=card_id)
    except CreditCard.DoesNotExist:
        raise CardNotFoundError(f"Card with ID {card_id} not found")

    policy.ensure_can_manage_card(get_card_role(card, user))

    changed = []
    for field in UPDATABLE_FIELDS:
        if field not in fields:
            continue
        value = fields[field]
        if field == 'card_name':
            value = _clean_card_name(value)
        elif field == 'last_four_digits':
            value = _clean_last_four(value)
        else:
            value = (value or '').strip()
        setattr(card, field, value)
        changed.append(field)

    if changed:
        card.save(update_fields=changed + ['updated_at'])
    return card


@transaction.atomic
def delete_card(*, card_id: UUID, user: User) -> None:
    """
    Delete a card and everything recorded on it (owner only).

    If the card was the owner's primary card, their oldest remaining card
    takes over.

    Raises:
        CardNotFoundError: If card doesn't exist
        AuthorizationError: If user is not the owner
    """
    try:
        card = CreditCard.objects.select_for_update().get(id=card_id)
    except CreditCard.DoesNotExist:
        raise CardNotFoundError(f"Card with ID {card_id} not found")

    policy.ensure_can_manage_card(get_card_role(card, user))

    owner_id = card.user_id
    was_primary = card.is_primary
    card.delete()

    if was_primary:
        successor = CreditCard.objects.filter(user_id=owner_id).order_by('created_at').first()
        if successor is not None:
            successor.is_primary = True
            successor.save(update_fields=['is_primary', 'updated_at'])

    logger.info("Deleted card %s", card_id)


def get_user_cards(*, user: User) -> List[CreditCard]:
    """
    Get every card the user can see, each annotated with ``user_role``.

    Owned cards first, then cards shared through a membership record, then
    cards whose legacy allow-list contains the user's e-mail.
    """
    cards = []
    seen = set()

    for card in CreditCard.objects.filter(user=user).select_related('user'):
        card.user_role = CardRole.OWNER
        cards.append(card)
        seen.add(card.id)

    memberships = (
        CardMember.objects
        .filter(user=user)
        .select_related('credit_card__user')
        .order_by('joined_at')
    )
    for membership in memberships:
        card = membership.credit_card
        if card.id in seen:
            continue
        card.user_role = membership.role
        cards.append(card)
        seen.add(card.id)

    email = normalize_email(user.email)
    if email:
        # icontains narrows on the serialized JSON; has_shared_email confirms
        candidates = (
            CreditCard.objects
            .filter(shared_emails__icontains=email)
            .exclude(id__in=seen)
            .select_related('user')
        )
        for card in candidates:
            if card.has_shared_email(email):
                card.user_role = CardRole.MEMBER
                cards.append(card)
                seen.add(card.id)

    return cards
