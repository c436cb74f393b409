"""
Custom permission classes for cards app.

Both classes resolve the requester's role through ``get_card_role`` so the
owner / membership record / shared e-mail precedence lives in one place.
Objects may be a ``CreditCard`` or anything with a ``credit_card``.
"""
from rest_framework import permissions

from apps.cards.models import CardRole, CreditCard
from apps.cards.services import get_card_role


def _card_of(obj):
    if isinstance(obj, CreditCard):
        return obj
    return obj.credit_card


class IsCardParticipant(permissions.BasePermission):
    """
    Permission: User must be the owner or a member of the card.
    """

    message = 'You must be a participant of this card.'

    def has_object_permission(self, request, view, obj):
        return get_card_role(_card_of(obj), request.user) is not None


class IsCardOwner(permissions.BasePermission):
    """
    Permission: User must be the card owner.
    """

    message = 'Only the card owner can do this.'

    def has_object_permission(self, request, view, obj):
        return get_card_role(_card_of(obj), request.user) == CardRole.OWNER
