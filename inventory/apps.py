"""Django app configuration for inventory."""

from django.apps import AppConfig


class InventoryConfig(AppConfig):
    """Stock counter adjustments and their movement ledger."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "inventory"
