from decimal import Decimal
from rest_framework import serializers

from .models import MONTH_NAMES, Category, Transaction, TransactionType


class TransactionSerializer(serializers.ModelSerializer):
    """Read serializer for ledger entries."""
    
    class Meta:
        model = Transaction
        fields = [
            'id',
            'credit_card',
            'user',
            'amount',
            'description',
            'day',
            'month',
            'year',
            'transaction_date',
            'transaction_type',
            'category',
            'spent_by',
            'is_common_split',
            'created_at',
        ]
        read_only_fields = fields


class TransactionCreateSerializer(serializers.Serializer):
    """Input for recording a single transaction."""
    
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    description = serializers.CharField(max_length=255)
    day = serializers.IntegerField(min_value=1, max_value=31)
    month = serializers.ChoiceField(choices=MONTH_NAMES)
    year = serializers.IntegerField(min_value=1, max_value=9999)
    transaction_type = serializers.ChoiceField(
        choices=TransactionType.choices,
        default=TransactionType.EXPENSE
    )
    category = serializers.ChoiceField(choices=Category.choices, default=Category.PERSONAL)
    spent_by = serializers.CharField(max_length=255, required=False, allow_blank=True)


class CommonExpenseSerializer(serializers.Serializer):
    """Input for a common expense split across participants."""
    
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    description = serializers.CharField(max_length=200)
    day = serializers.IntegerField(min_value=1, max_value=31)
    month = serializers.ChoiceField(choices=MONTH_NAMES)
    year = serializers.IntegerField(min_value=1, max_value=9999)
    participant_ids = serializers.ListField(
        child=serializers.CharField(),
        min_length=2,
        error_messages={'min_length': 'Select at least two participants to split an expense.'}
    )


class PeriodSerializer(serializers.Serializer):
    """Query parameters selecting one statement period."""
    
    month = serializers.ChoiceField(choices=MONTH_NAMES)
    year = serializers.IntegerField(min_value=1, max_value=9999)


class PersonSerializer(serializers.Serializer):
    
    id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    role = serializers.CharField(read_only=True)


class GuestCreateSerializer(serializers.Serializer):
    
    name = serializers.CharField(max_length=100)


class PersonBalanceSerializer(serializers.Serializer):
    
    person = PersonSerializer(read_only=True)
    personal_expenses = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    common_expenses = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    total_owed = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    payments = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)


class BalanceTotalsSerializer(serializers.Serializer):
    
    personal_expenses = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    common_expenses = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    total_owed = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    payments = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    transaction_count = serializers.IntegerField(read_only=True)


class StatementSerializer(serializers.Serializer):
    """Monthly statement: participants, balances, totals and entries."""
    
    card = serializers.UUIDField(source='card.id', read_only=True)
    month = serializers.CharField(read_only=True)
    year = serializers.IntegerField(read_only=True)
    participants = PersonSerializer(source='participants.people', many=True, read_only=True)
    balances = PersonBalanceSerializer(source='summary.balances', many=True, read_only=True)
    totals = BalanceTotalsSerializer(source='summary', read_only=True)
    unmatched = TransactionSerializer(source='summary.unmatched', many=True, read_only=True)
    transactions = TransactionSerializer(many=True, read_only=True)
    warnings = serializers.ListField(child=serializers.CharField(), read_only=True)
