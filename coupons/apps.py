"""Django app configuration for coupons."""

from django.apps import AppConfig


class CouponsConfig(AppConfig):
    """AppConfig for named, time-boxed discount codes."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "coupons"
