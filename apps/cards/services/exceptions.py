"""
Domain-specific exceptions for cards app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class CardsServiceError(Exception):
    """Base exception for all cards service errors."""
    pass


class AuthorizationError(CardsServiceError):
    """Raised when the access policy rejects an action."""
    pass


class CardNotFoundError(CardsServiceError):
    """Raised when a card does not exist or is inaccessible."""
    pass


class InvalidCardDataError(CardsServiceError):
    """Raised when card input fails validation."""
    pass


class NotMemberError(CardsServiceError):
    """Raised when a user is not a member of the card."""
    pass


class OwnerCannotLeaveError(CardsServiceError):
    """Raised when a card owner tries to leave their own card."""
    pass


class CannotRemoveOwnerError(CardsServiceError):
    """Raised when attempting to remove the card owner."""
    pass


class InvitationNotFoundError(CardsServiceError):
    """Raised when an invitation does not exist."""
    pass


class InvalidInvitationError(CardsServiceError):
    """Raised when an invitation cannot be created or acted upon."""
    pass


class DuplicateInvitationError(InvalidInvitationError):
    """Raised when a pending invitation already exists for the card and email."""
    pass


class AlreadyMemberError(InvalidInvitationError):
    """Raised when the invited person already has access to the card."""
    pass


class InvitationExpiredError(InvalidInvitationError):
    """Raised when accepting an invitation past its expiry."""
    pass


class NotificationError(CardsServiceError):
    """Raised when an outbound email could not be delivered."""
    pass
