# ==========================================
# apps/ledger/models.py
# ==========================================

from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from decimal import Decimal
import calendar
import uuid


MONTH_NAMES = list(calendar.month_name)[1:]


class Month(models.TextChoices):
    JANUARY = 'January', 'January'
    FEBRUARY = 'February', 'February'
    MARCH = 'March', 'March'
    APRIL = 'April', 'April'
    MAY = 'May', 'May'
    JUNE = 'June', 'June'
    JULY = 'July', 'July'
    AUGUST = 'August', 'August'
    SEPTEMBER = 'September', 'September'
    OCTOBER = 'October', 'October'
    NOVEMBER = 'November', 'November'
    DECEMBER = 'December', 'December'


def month_number(month_name):
    """1-based month number for an English month name."""
    return MONTH_NAMES.index(month_name) + 1


class TransactionType(models.TextChoices):
    EXPENSE = 'expense', 'Expense'
    PAYMENT = 'payment', 'Payment'


class Category(models.TextChoices):
    PERSONAL = 'personal', 'Personal'
    COMMON = 'common', 'Common'


class Transaction(models.Model):
    """
    One immutable ledger entry on a card.

    ``spent_by`` holds the display name of the person the entry is
    attributed to; it is denormalised on purpose and matched by name.
    """
    
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    credit_card = models.ForeignKey(
        'cards.CreditCard',
        on_delete=models.CASCADE,
        related_name='transactions'
    )
    
    # Authenticated actor who recorded the entry
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='recorded_transactions'
    )
    
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    description = models.CharField(max_length=255)
    
    # Statement period
    day = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(31)]
    )
    month = models.CharField(max_length=9, choices=Month.choices)
    year = models.PositiveSmallIntegerField()
    transaction_date = models.DateField()
    
    transaction_type = models.CharField(
        max_length=10,
        choices=TransactionType.choices,
        default=TransactionType.EXPENSE
    )
    category = models.CharField(
        max_length=10,
        choices=Category.choices,
        default=Category.PERSONAL
    )
    spent_by = models.CharField(max_length=255)
    is_common_split = models.BooleanField(default=False)
    
    created_at = models.DateTimeField(auto_now_add=True)
    
    class Meta:
        db_table = 'transactions'
        indexes = [
            models.Index(fields=['credit_card', 'year', 'month'], name='txn_card_period_idx'),
            models.Index(fields=['credit_card', 'spent_by'], name='txn_card_spent_by_idx'),
        ]
        ordering = ['-transaction_date', '-created_at']
    
    def __str__(self):
        return f"{self.description}: {self.amount} ({self.spent_by}, {self.month} {self.year})"
