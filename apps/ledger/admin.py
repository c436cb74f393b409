# ==========================================
# apps/ledger/admin.py
# ==========================================

from django.contrib import admin
from apps.ledger.models import Transaction


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    """
    Read-only admin for ledger entries.

    Transactions are never edited in place; corrections are a delete plus a
    new entry made through the API.
    """
    
    list_display = [
        'description',
        'amount',
        'spent_by',
        'transaction_type',
        'category',
        'is_common_split',
        'credit_card',
        'transaction_date',
    ]
    list_filter = ['transaction_type', 'category', 'is_common_split', 'year', 'month']
    search_fields = ['description', 'spent_by', 'credit_card__card_name', 'user__email']
    date_hierarchy = 'transaction_date'
    ordering = ['-transaction_date', '-created_at']
    list_select_related = ['credit_card']
    
    def has_add_permission(self, request):
        return False
    
    def has_change_permission(self, request, obj=None):
        return False
