"""
Cards app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and concurrency protection.
"""

from .exceptions import (
    CardsServiceError,
    AuthorizationError,
    CardNotFoundError,
    InvalidCardDataError,
    NotMemberError,
    OwnerCannotLeaveError,
    CannotRemoveOwnerError,
    InvitationNotFoundError,
    InvalidInvitationError,
    DuplicateInvitationError,
    AlreadyMemberError,
    InvitationExpiredError,
    NotificationError,
)

from .membership_management import (
    MembershipEntry,
    merge_memberships,
    get_card_role,
    get_card_access,
    get_card_members,
    remove_member,
    leave_card,
)

from .card_management import (
    create_card,
    get_card_by_id,
    update_card,
    delete_card,
    get_user_cards,
)

from .notifications import (
    send_invitation_email,
    notify_new_transaction,
    notify_new_transactions,
)

from .invite_management import (
    InvitationResult,
    create_invitation,
    accept_invitation,
    revoke_invitation,
    get_pending_invitations,
    get_my_invitations,
)


__all__ = [
    # Exceptions
    'CardsServiceError',
    'AuthorizationError',
    'CardNotFoundError',
    'InvalidCardDataError',
    'NotMemberError',
    'OwnerCannotLeaveError',
    'CannotRemoveOwnerError',
    'InvitationNotFoundError',
    'InvalidInvitationError',
    'DuplicateInvitationError',
    'AlreadyMemberError',
    'InvitationExpiredError',
    'NotificationError',

    # Membership Management
    'MembershipEntry',
    'merge_memberships',
    'get_card_role',
    'get_card_access',
    'get_card_members',
    'remove_member',
    'leave_card',

    # Card Management
    'create_card',
    'get_card_by_id',
    'update_card',
    'delete_card',
    'get_user_cards',

    # Notifications
    'send_invitation_email',
    'notify_new_transaction',
    'notify_new_transactions',

    # Invitation Management
    'InvitationResult',
    'create_invitation',
    'accept_invitation',
    'revoke_invitation',
    'get_pending_invitations',
    'get_my_invitations',
]
