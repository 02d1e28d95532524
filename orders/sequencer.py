"""Short human-readable order identifiers.

Identifiers are random strings over ``0-9A-Za-z`` (6 characters by default).
A cheap existence check skips most collisions, but the unique constraint on
``Order.order_id`` is what actually guarantees uniqueness: two placements that
pass the check with the same candidate race on the insert and the loser
retries with a fresh id.
"""

import logging
import secrets
import string
from typing import Callable, Optional

from common.exceptions import IdGenerationExhausted
from django.conf import settings
from django.db import IntegrityError, transaction

from .models import Order

logger = logging.getLogger("eshop.orders")

ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase


def generate_order_id(length: Optional[int] = None) -> str:
    length = length or getattr(settings, "ORDER_ID_LENGTH", 6)
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def _order_id_taken(candidate: str) -> bool:
    # Soft-deleted orders keep their identifier
    return Order.objects.filter(order_id=candidate).exists()


def create_with_order_id(
    build: Callable[[str], Order],
    *,
    attempts: Optional[int] = None,
    id_factory: Callable[[], str] = generate_order_id,
) -> Order:
    """Persist an order through ``build(order_id)`` with a fresh identifier.

    ``build`` runs inside a savepoint and must create the order row with the
    given id. Integrity errors caused by anything other than an id collision
    propagate unchanged.
    """

    attempts = attempts or getattr(settings, "ORDER_ID_MAX_ATTEMPTS", 5)
    for attempt in range(1, attempts + 1):
        candidate = id_factory()
        if _order_id_taken(candidate):
            logger.info(
                "order.id_collision",
                extra={"event": "order.id_collision", "attempt": attempt, "stage": "precheck"},
            )
            continue
        try:
            with transaction.atomic():
                return build(candidate)
        except IntegrityError:
            if not _order_id_taken(candidate):
                raise
            logger.info(
                "order.id_collision",
                extra={"event": "order.id_collision", "attempt": attempt, "stage": "insert"},
            )
    logger.error("order.id_exhausted", extra={"event": "order.id_exhausted", "attempts": attempts})
    raise IdGenerationExhausted(f"Failed to generate a unique order id after {attempts} attempts")
