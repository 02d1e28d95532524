"""Value objects for order placement.

These validate raw request or gateway data before any database work happens.
"""

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import List, Optional

from common.exceptions import InvalidInput
from django.core.exceptions import ValidationError
from django.core.validators import validate_email

REQUIRED_ADDRESS_FIELDS = ("name", "details", "phone", "city")
OPTIONAL_ADDRESS_FIELDS = ("street", "apartment", "floor", "postal_code", "email")


def _clean(value) -> str:
    if value is None:
        return ""
    if not isinstance(value, (str, int)) or isinstance(value, bool):
        raise InvalidInput("Shipping address fields must be text")
    return str(value).strip()


@dataclass(frozen=True)
class ShippingAddress:
    name: str
    details: str
    phone: str
    city: str
    street: str = ""
    apartment: str = ""
    floor: str = ""
    postal_code: str = ""
    email: str = ""

    @classmethod
    def from_mapping(cls, data) -> "ShippingAddress":
        """Build an address from request or gateway metadata, or raise ``InvalidInput``."""

        if not isinstance(data, Mapping) or not data:
            raise InvalidInput("Shipping address is required")
        values = {key: _clean(data.get(key)) for key in REQUIRED_ADDRESS_FIELDS + OPTIONAL_ADDRESS_FIELDS}
        if not values["postal_code"] and data.get("postalCode"):
            values["postal_code"] = _clean(data.get("postalCode"))
        missing = [key for key in REQUIRED_ADDRESS_FIELDS if not values[key]]
        if missing:
            raise InvalidInput(
                "Shipping address must include details, city, phone, and name", missing=missing
            )
        if values["email"]:
            try:
                validate_email(values["email"])
            except ValidationError:
                raise InvalidInput("Shipping address email is not valid")
        return cls(**values)

    def as_dict(self) -> dict:
        return {key: value for key, value in asdict(self).items() if value}

    def one_line(self) -> str:
        parts = [self.details, self.city, self.apartment, self.floor, self.street, self.postal_code]
        return ", ".join(p for p in parts if p)


@dataclass(frozen=True)
class OrderLine:
    product_id: int
    quantity: int
    color: str = ""


def parse_order_lines(items) -> List[OrderLine]:
    """Validate the requested products list.

    Each entry needs a product id (``product_id`` or ``id``) and an optional
    positive integer ``quantity`` (default 1) and ``color``.
    """

    if not isinstance(items, (list, tuple)) or not items:
        raise InvalidInput("Products array is required and cannot be empty")
    lines = []
    for index, raw in enumerate(items):
        if not isinstance(raw, Mapping):
            raise InvalidInput(f"Product at index {index} must be an object", index=index)
        product_id = raw.get("product_id", raw.get("id"))
        if product_id in (None, "") or isinstance(product_id, bool):
            raise InvalidInput(f"Product at index {index} must have an id", index=index)
        try:
            product_id = int(product_id)
        except (TypeError, ValueError):
            raise InvalidInput(f"Product at index {index} has a malformed id", index=index)
        quantity = raw.get("quantity", 1)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise InvalidInput(f"Product at index {index} must have a positive integer quantity", index=index)
        color = raw.get("color") or ""
        if not isinstance(color, str):
            raise InvalidInput(f"Product at index {index} has a malformed color", index=index)
        lines.append(OrderLine(product_id=product_id, quantity=quantity, color=color.strip()))
    return lines


def contact_email(address: ShippingAddress, *, guest_email: Optional[str] = None, user=None) -> str:
    """Pick the address to notify: shipping email, then guest email, then account email."""

    for candidate in (address.email, guest_email, getattr(user, "email", None)):
        if candidate:
            return candidate.strip().lower()
    return ""
