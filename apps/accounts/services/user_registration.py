"""User registration service."""

import logging

from django.db import transaction, IntegrityError
from django.contrib.auth import get_user_model

from .exceptions import UserRegistrationError

User = get_user_model()

logger = logging.getLogger(__name__)


@transaction.atomic
def register_user(
    *,
    email: str,
    password: str,
    full_name: str = ""
) -> User:
    """
    Register a new user.

    Args:
        email: User's email address (stored lower-cased)
        password: User's password (will be hashed)
        full_name: Optional full name used as the display name

    Returns:
        Created User instance

    Raises:
        UserRegistrationError: If the email is already registered
    """
    email = email.strip().lower()

    if User.objects.filter(email=email).exists():
        raise UserRegistrationError("An account with this email already exists")

    try:
        user = User.objects.create_user(
            email=email,
            password=password,
            full_name=full_name.strip()
        )
    except IntegrityError:
        raise UserRegistrationError("An account with this email already exists")

    logger.info("Registered user %s", user.id)
    return user
