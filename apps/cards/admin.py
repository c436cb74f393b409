# ==========================================
# apps/cards/admin.py
# ==========================================

from django.contrib import admin
from apps.cards.models import CreditCard, CardMember, CardInvitation, InvitationStatus


class CardMemberInline(admin.TabularInline):
    """Inline admin for card memberships."""
    model = CardMember
    extra = 0
    fields = ['user', 'role', 'joined_at']
    readonly_fields = ['joined_at']


@admin.register(CreditCard)
class CreditCardAdmin(admin.ModelAdmin):
    """Admin interface for credit cards."""
    
    list_display = [
        'card_name',
        'last_four_digits',
        'user',
        'member_count',
        'is_primary',
        'created_at'
    ]
    list_filter = ['is_primary', 'card_type', 'created_at']
    search_fields = ['card_name', 'issuing_bank', 'user__email', 'user__full_name']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [CardMemberInline]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']
    
    fieldsets = (
        ('Basic Information', {
            'fields': ('card_name', 'last_four_digits', 'issuing_bank', 'card_type', 'user', 'is_primary')
        }),
        ('Sharing', {
            'fields': ('shared_emails',),
            'description': 'Legacy e-mail allow-list. New sharing goes through invitations.'
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
    
    def member_count(self, obj):
        """Show number of membership records."""
        return obj.memberships.count()
    member_count.short_description = 'Members'


@admin.register(CardInvitation)
class CardInvitationAdmin(admin.ModelAdmin):
    """Admin interface for card invitations."""
    
    list_display = ['invited_email', 'credit_card', 'inviter', 'status', 'invited_at', 'expires_at']
    list_filter = ['status', 'invited_at']
    search_fields = ['invited_email', 'credit_card__card_name', 'inviter__email']
    readonly_fields = ['invited_at', 'accepted_at', 'updated_at']
    ordering = ['-invited_at']
    
    actions = ['revoke_selected']
    
    def revoke_selected(self, request, queryset):
        """Revoke selected pending invitations."""
        updated = queryset.filter(status=InvitationStatus.PENDING).update(status=InvitationStatus.REVOKED)
        self.message_user(request, f"Revoked {updated} invitations")
    revoke_selected.short_description = 'Revoke selected pending invitations'
