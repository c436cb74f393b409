from django.apps import AppConfig


class LedgerConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.ledger'
    label = 'ledger'
    verbose_name = 'Ledger'

    def ready(self):
        # Connects the Transaction change-feed receivers
        from apps.ledger import realtime  # noqa: F401
