# ==========================================
# apps/accounts/admin.py
# ==========================================

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Admin interface for accounts.

    The full name is what every transaction's ``spent_by`` refers to, so it
    is shown next to the email everywhere.
    """

    list_display = [
        'email',
        'full_name',
        'is_active_badge',
        'is_staff',
        'owned_card_count',
        'created_at',
        'last_login',
    ]

    list_filter = [
        'is_active',
        'is_staff',
        'is_superuser',
        'created_at',
    ]

    search_fields = [
        'email',
        'full_name',
    ]

    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    # Remove username field references from BaseUserAdmin
    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'full_name', 'password')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'full_name', 'password1', 'password2'),
        }),
    )

    readonly_fields = ['created_at', 'updated_at', 'last_login']

    def is_active_badge(self, obj):
        color = 'green' if obj.is_active else 'red'
        label = 'Active' if obj.is_active else 'Inactive'
        return format_html('<span style="color: {};">{}</span>', color, label)
    is_active_badge.short_description = 'Status'

    def owned_card_count(self, obj):
        return obj.credit_cards.count()
    owned_card_count.short_description = 'Cards'
