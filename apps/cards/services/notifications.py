"""
Outbound e-mail.

Invitation e-mails are sent synchronously with a bounded wait so the
inviter learns whether delivery failed. New-transaction notices are
fire-and-forget: they run after the originating write commits and never
affect it.
"""

import logging
import smtplib

from django.conf import settings
from django.core.mail import get_connection, send_mail
from django.db import transaction

from .exceptions import NotificationError
from .membership_management import get_card_members

logger = logging.getLogger(__name__)


def _connection():
    return get_connection(timeout=settings.EMAIL_TIMEOUT)


def invitation_link(invitation) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/invitations/{invitation.id}"


def send_invitation_email(invitation) -> None:
    """
    Send the invitation e-mail for a pending invitation.

    Raises:
        NotificationError: If the mail backend fails or times out
    """
    card = invitation.credit_card
    inviter_name = invitation.inviter.get_display_name()
    subject = f"{inviter_name} invited you to share {card.card_name}"
    body = (
        f"{inviter_name} invited you to join the card "
        f"\"{card.card_name}\" ending in {card.last_four_digits} on Splitify.\n\n"
        f"Accept the invitation: {invitation_link(invitation)}\n\n"
        f"This invitation expires on {invitation.expires_at:%Y-%m-%d}."
    )

    try:
        send_mail(
            subject,
            body,
            settings.DEFAULT_FROM_EMAIL,
            [invitation.invited_email],
            connection=_connection(),
            fail_silently=False,
        )
    except (smtplib.SMTPException, OSError) as e:
        logger.warning(
            "Invitation e-mail for %s on card %s failed: %s",
            invitation.invited_email, card.id, e,
        )
        raise NotificationError("Failed to send invitation email") from e


def _transaction_recipients(txn):
    card = txn.credit_card
    users = [card.user] + [entry.user for entry in get_card_members(card_id=card.id)]
    return [
        user.email for user in users
        if user.email and user.id != txn.user_id
    ]


def _describe(txn) -> str:
    return (
        f"{txn.spent_by} recorded {txn.amount} for \"{txn.description}\" "
        f"on {txn.day} {txn.month} {txn.year}."
    )


def _send_new_transactions_email(txns) -> None:
    first = txns[0]
    try:
        recipients = _transaction_recipients(first)
        if not recipients:
            return
        card = first.credit_card
        if len(txns) == 1:
            subject = f"New transaction on {card.card_name}"
        else:
            subject = f"New common expense on {card.card_name}"
        body = "\n".join(_describe(txn) for txn in txns)
        send_mail(
            subject,
            body,
            settings.DEFAULT_FROM_EMAIL,
            recipients,
            connection=_connection(),
            fail_silently=False,
        )
    except Exception:
        # Never propagates: the transactions are already committed
        logger.exception(
            "New-transaction e-mail for transaction(s) %s failed",
            ", ".join(str(txn.id) for txn in txns),
        )


def notify_new_transactions(txns) -> None:
    """
    Schedule one notice covering ``txns`` for after the current commit.

    All transactions must belong to the same card and actor, as the leaves
    of one common split do.
    """
    txns = list(txns)
    if not txns:
        return
    transaction.on_commit(lambda: _send_new_transactions_email(txns))


def notify_new_transaction(txn) -> None:
    """Schedule the new-transaction notice for after the current commit."""
    notify_new_transactions([txn])
