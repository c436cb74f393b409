"""
Access policy for card-scoped actions.

Pure predicates over the requester's role on a card and, where relevant,
the requester's resolved display name. Roles are ``'owner'``, ``'member'``
or ``'guest'``; anything else (including ``None`` for users without access)
is denied. Guests never act on their own: whoever operates on their behalf
is checked instead.

The ``ensure_*`` helpers raise ``AuthorizationError`` so write paths can
validate before they touch the database.
"""

from apps.cards.models import CardRole
from apps.cards.services.exceptions import AuthorizationError


def _is_owner(role) -> bool:
    return role == CardRole.OWNER


def _is_member(role) -> bool:
    return role == CardRole.MEMBER


def can_view_card(role) -> bool:
    return _is_owner(role) or _is_member(role)


def can_create_common_expense(role) -> bool:
    """Only the owner may enter an expense split across participants."""
    return _is_owner(role)


def can_create_transaction(role, requester_name: str, spent_by: str) -> bool:
    """Owner records for anyone; a member only for themself."""
    if _is_owner(role):
        return True
    if _is_member(role):
        return spent_by == requester_name
    return False


def can_delete_transaction(role, requester_name: str, txn) -> bool:
    """Owner deletes anything on the card; a member only their own records."""
    if _is_owner(role):
        return True
    if _is_member(role):
        return txn.spent_by == requester_name
    return False


def can_manage_members(role) -> bool:
    """Membership and invitations are owner-only."""
    return _is_owner(role)


def can_manage_card(role) -> bool:
    """Renaming or deleting a card is owner-only."""
    return _is_owner(role)


def ensure_can_create_common_expense(role) -> None:
    if not can_create_common_expense(role):
        raise AuthorizationError(
            "You don't have permission to add common expenses on this card"
        )


def ensure_can_create_transaction(role, requester_name: str, spent_by: str) -> None:
    if not can_create_transaction(role, requester_name, spent_by):
        raise AuthorizationError(
            "You don't have permission to record transactions for someone else"
        )


def ensure_can_delete_transaction(role, requester_name: str, txn) -> None:
    if not can_delete_transaction(role, requester_name, txn):
        raise AuthorizationError(
            "You don't have permission to delete this transaction"
        )


def ensure_can_manage_members(role) -> None:
    if not can_manage_members(role):
        raise AuthorizationError(
            "You don't have permission to manage members of this card"
        )


def ensure_can_manage_card(role) -> None:
    if not can_manage_card(role):
        raise AuthorizationError(
            "You don't have permission to change this card"
        )
