"""Credential checks behind the login endpoint."""

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from .exceptions import InactiveAccountError, InvalidCredentialsError

User = get_user_model()

INVALID_CREDENTIALS = "Invalid email or password"


def _locked_account(email):
    """Account for ``email`` (trimmed, lower-cased) locked for update, or None."""
    normalized = (email or '').strip().lower()
    if not normalized:
        return None
    return User.objects.select_for_update().filter(email=normalized).first()


@transaction.atomic
def authenticate_user(*, email: str, password: str) -> User:
    """
    Check an e-mail / password pair and stamp ``last_login``.

    E-mails are stored lower-cased, so ``Owner@Example.com `` logs in the
    same account as ``owner@example.com``. An unknown e-mail and a wrong
    password raise the same error.

    Raises:
        InvalidCredentialsError: If the pair does not match an account
        InactiveAccountError: If the account is deactivated
    """
    user = _locked_account(email)
    if user is None or not user.check_password(password or ''):
        raise InvalidCredentialsError(INVALID_CREDENTIALS)

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])
    return user
