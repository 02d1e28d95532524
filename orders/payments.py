"""Payment gateway seam for card checkouts.

The gateway is chosen by the ``PAYMENT_GATEWAY_BACKEND`` setting (a dotted
path to a `PaymentGateway` subclass). The default `DummyGateway` never talks
to a network service; it issues fake session URLs and understands a
provider-style ``checkout.session.completed`` webhook payload so the whole
flow can be exercised locally and in tests.
"""

import hmac
import uuid
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from common.exceptions import InvalidInput
from django.conf import settings
from django.utils.module_loading import import_string


@dataclass(frozen=True)
class CheckoutRequest:
    correlation_id: str
    amount: Decimal
    currency: str
    description: str
    success_url: str
    cancel_url: str
    customer_email: str = ""
    metadata: dict = field(default_factory=dict)

    @property
    def amount_minor_units(self) -> int:
        return int((self.amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    url: str
    correlation_id: str
    amount: Decimal
    currency: str


@dataclass(frozen=True)
class PaymentEvent:
    """A completed payment as reported by the gateway."""

    correlation_id: str
    amount_paid: Decimal
    payer_email: str = ""
    metadata: dict = field(default_factory=dict)


class PaymentGateway:
    completed_event_type = "checkout.session.completed"

    def create_session(self, request: CheckoutRequest) -> CheckoutSession:  # pragma: no cover
        raise NotImplementedError

    def parse_event(self, payload) -> Optional[PaymentEvent]:
        """Turn a webhook body into a `PaymentEvent`.

        Returns None for event types that do not confirm a payment; raises
        ``InvalidInput`` for a malformed completion event.
        """

        if not isinstance(payload, dict):
            raise InvalidInput("Webhook payload must be an object")
        if payload.get("type") != self.completed_event_type:
            return None
        session = (payload.get("data") or {}).get("object") or {}
        reference = session.get("client_reference_id")
        if not reference:
            raise InvalidInput("Webhook payload is missing client_reference_id")
        try:
            amount = (Decimal(str(session.get("amount_total"))) / 100).quantize(Decimal("0.01"))
        except (InvalidOperation, TypeError):
            raise InvalidInput("Webhook payload has a malformed amount_total")
        metadata = session.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise InvalidInput("Webhook metadata must be an object")
        return PaymentEvent(
            correlation_id=str(reference),
            amount_paid=amount,
            payer_email=session.get("customer_email") or "",
            metadata=metadata,
        )


class DummyGateway(PaymentGateway):
    """Offline gateway that fabricates hosted-checkout sessions."""

    def create_session(self, request: CheckoutRequest) -> CheckoutSession:
        session_id = f"cs_test_{uuid.uuid4().hex}"
        return CheckoutSession(
            session_id=session_id,
            url=f"https://checkout.invalid/pay/{session_id}",
            correlation_id=request.correlation_id,
            amount=request.amount,
            currency=request.currency,
        )


def get_payment_gateway() -> PaymentGateway:
    backend = getattr(settings, "PAYMENT_GATEWAY_BACKEND", "orders.payments.DummyGateway")
    return import_string(backend)()


def webhook_secret_matches(provided: Optional[str]) -> bool:
    """Compare the ``X-Webhook-Secret`` header against ``PAYMENT_WEBHOOK_SECRET``.

    Without a configured secret every delivery is refused, except under
    ``DEBUG`` where local runs may post events by hand.
    """

    expected = getattr(settings, "PAYMENT_WEBHOOK_SECRET", "")
    if not expected:
        return bool(settings.DEBUG)
    return hmac.compare_digest(str(provided or ""), str(expected))
