# Generated manually for the ledger app

import uuid
from decimal import Decimal
import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('cards', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Transaction',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('description', models.CharField(max_length=255)),
                ('day', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(31)])),
                ('month', models.CharField(choices=[('January', 'January'), ('February', 'February'), ('March', 'March'), ('April', 'April'), ('May', 'May'), ('June', 'June'), ('July', 'July'), ('August', 'August'), ('September', 'September'), ('October', 'October'), ('November', 'November'), ('December', 'December')], max_length=9)),
                ('year', models.PositiveSmallIntegerField()),
                ('transaction_date', models.DateField()),
                ('transaction_type', models.CharField(choices=[('expense', 'Expense'), ('payment', 'Payment')], default='expense', max_length=10)),
                ('category', models.CharField(choices=[('personal', 'Personal'), ('common', 'Common')], default='personal', max_length=10)),
                ('spent_by', models.CharField(max_length=255)),
                ('is_common_split', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('credit_card', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='transactions', to='cards.creditcard')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='recorded_transactions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'transactions',
                'ordering': ['-transaction_date', '-created_at'],
                'indexes': [
                    models.Index(fields=['credit_card', 'year', 'month'], name='txn_card_period_idx'),
                    models.Index(fields=['credit_card', 'spent_by'], name='txn_card_spent_by_idx'),
                ],
            },
        ),
    ]
