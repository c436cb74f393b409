# ==========================================
# apps/cards/models.py
# ==========================================

from datetime import timedelta
from django.conf import settings
from django.core.validators import RegexValidator
from django.db import models
from django.utils import timezone
import uuid


class CardRole(models.TextChoices):
    OWNER = 'owner', 'Owner'
    MEMBER = 'member', 'Member'


class InvitationStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    ACCEPTED = 'accepted', 'Accepted'
    REVOKED = 'revoked', 'Revoked'


def normalize_email(email):
    return (email or '').strip().lower()


class CreditCard(models.Model):
    """A shared credit card; the unit every transaction is scoped to."""
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='credit_cards')
    card_name = models.CharField(max_length=100)
    last_four_digits = models.CharField(
        max_length=4,
        validators=[RegexValidator(r'^\d{4}$', 'Enter exactly four digits.')]
    )
    issuing_bank = models.CharField(max_length=100, blank=True)
    card_type = models.CharField(max_length=50, blank=True)
    is_primary = models.BooleanField(default=False)
    
    # Legacy allow-list kept for cards shared before membership records existed
    shared_emails = models.JSONField(default=list, blank=True)
    
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    
    class Meta:
        db_table = 'credit_cards'
        indexes = [
            models.Index(fields=['user', 'created_at'], name='credit_card_user_created_idx'),
        ]
        ordering = ['created_at']
    
    def __str__(self):
        return f"{self.card_name} (*{self.last_four_digits})"
    
    def is_owner(self, user):
        return self.user_id == user.id
    
    def has_shared_email(self, email):
        email = normalize_email(email)
        return bool(email) and any(
            normalize_email(shared) == email for shared in (self.shared_emails or [])
        )


class CardMember(models.Model):
    """Explicit membership record granting a user access to a card."""
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    credit_card = models.ForeignKey(CreditCard, on_delete=models.CASCADE, related_name='memberships')
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='card_memberships')
    role = models.CharField(max_length=20, choices=CardRole.choices, default=CardRole.MEMBER)
    joined_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    
    class Meta:
        db_table = 'card_members'
        unique_together = [['credit_card', 'user']]
        indexes = [
            models.Index(fields=['credit_card', 'role'], name='card_member_card_role_idx'),
            models.Index(fields=['user', 'joined_at'], name='card_member_user_joined_idx'),
        ]
        ordering = ['joined_at']
    
    def __str__(self):
        return f"{self.user.get_display_name()} on {self.credit_card.card_name} ({self.role})"


def default_invitation_expiry():
    return timezone.now() + timedelta(days=settings.INVITATION_EXPIRY_DAYS)


class CardInvitation(models.Model):
    """Pending offer of card membership sent to an email address."""
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    credit_card = models.ForeignKey(CreditCard, on_delete=models.CASCADE, related_name='invitations')
    inviter = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='sent_card_invitations')
    invited_email = models.EmailField(max_length=255)
    invited_user = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='accepted_card_invitations'
    )
    role = models.CharField(max_length=20, choices=CardRole.choices, default=CardRole.MEMBER)
    status = models.CharField(
        max_length=20,
        choices=InvitationStatus.choices,
        default=InvitationStatus.PENDING
    )
    invited_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField(default=default_invitation_expiry)
    accepted_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)
    
    class Meta:
        db_table = 'card_invitations'
        constraints = [
            models.UniqueConstraint(
                fields=['credit_card', 'invited_email'],
                condition=models.Q(status='pending'),
                name='unique_pending_invitation_per_card_email',
            ),
        ]
        indexes = [
            models.Index(fields=['credit_card', 'status'], name='card_invite_card_status_idx'),
            models.Index(fields=['invited_email', 'status'], name='card_invite_email_status_idx'),
        ]
        ordering = ['-invited_at']
    
    def __str__(self):
        return f"{self.invited_email} -> {self.credit_card.card_name} ({self.status})"
    
    def save(self, *args, **kwargs):
        self.invited_email = normalize_email(self.invited_email)
        super().save(*args, **kwargs)
    
    @property
    def is_expired(self):
        return self.expires_at <= timezone.now()
