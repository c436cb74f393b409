# Generated manually for the cards app

import uuid
import apps.cards.models
import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='CreditCard',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('card_name', models.CharField(max_length=100)),
                ('last_four_digits', models.CharField(max_length=4, validators=[django.core.validators.RegexValidator('^\\d{4}$', 'Enter exactly four digits.')])),
                ('issuing_bank', models.CharField(blank=True, max_length=100)),
                ('card_type', models.CharField(blank=True, max_length=50)),
                ('is_primary', models.BooleanField(default=False)),
                ('shared_emails', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='credit_cards', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'credit_cards',
                'ordering': ['created_at'],
                'indexes': [
                    models.Index(fields=['user', 'created_at'], name='credit_card_user_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CardMember',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('role', models.CharField(choices=[('owner', 'Owner'), ('member', 'Member')], default='member', max_length=20)),
                ('joined_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('credit_card', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='memberships', to='cards.creditcard')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='card_memberships', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'card_members',
                'ordering': ['joined_at'],
                'unique_together': {('credit_card', 'user')},
                'indexes': [
                    models.Index(fields=['credit_card', 'role'], name='card_member_card_role_idx'),
                    models.Index(fields=['user', 'joined_at'], name='card_member_user_joined_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CardInvitation',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('invited_email', models.EmailField(max_length=255)),
                ('role', models.CharField(choices=[('owner', 'Owner'), ('member', 'Member')], default='member', max_length=20)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('accepted', 'Accepted'), ('revoked', 'Revoked')], default='pending', max_length=20)),
                ('invited_at', models.DateTimeField(auto_now_add=True)),
                ('expires_at', models.DateTimeField(default=apps.cards.models.default_invitation_expiry)),
                ('accepted_at', models.DateTimeField(blank=True, null=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('credit_card', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='invitations', to='cards.creditcard')),
                ('inviter', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sent_card_invitations', to=settings.AUTH_USER_MODEL)),
                ('invited_user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='accepted_card_invitations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'card_invitations',
                'ordering': ['-invited_at'],
                'indexes': [
                    models.Index(fields=['credit_card', 'status'], name='card_invite_card_status_idx'),
                    models.Index(fields=['invited_email', 'status'], name='card_invite_email_status_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('status', 'pending')), fields=('credit_card', 'invited_email'), name='unique_pending_invitation_per_card_email'),
                ],
            },
        ),
    ]
