"""Helpers shared by DRF views."""

from rest_framework.response import Response

from .exceptions import ShopError


def error_response(exc: ShopError) -> Response:
    """Render a domain error as the standard ``{"detail", "code"}`` body."""

    return Response({"detail": exc.detail, "code": exc.code}, status=exc.status_code)


def parse_bool(value) -> bool:
    """Interpret a query parameter flag such as ``?include_deleted=true``."""

    if value is None:
        return False
    return str(value).strip().lower() in {"1", "true", "yes", "on"}
