"""Throttles for public catalog browsing."""

from django.conf import settings
from rest_framework.throttling import ScopedRateThrottle


class CatalogScopedRateThrottle(ScopedRateThrottle):
    """Scoped throttle whose rate is looked up on every request.

    Rates come from ``REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"]`` so a settings
    override applies without re-importing DRF. Unknown scopes are unthrottled.
    """

    def get_rate(self):
        rates = getattr(settings, "REST_FRAMEWORK", {}).get("DEFAULT_THROTTLE_RATES", {})
        return rates.get(self.scope)
