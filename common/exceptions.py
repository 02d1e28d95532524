"""Domain errors shared by the cart, coupon, and order services.

Services raise these; views translate them into ``{"detail", "code"}``
responses using the error's ``status_code``.
"""


class ShopError(Exception):
    """Base class for failures a caller can act on."""

    code = "error"
    status_code = 400
    default_message = "Unable to process request."

    def __init__(self, message: str | None = None, **context):
        super().__init__(message or self.default_message)
        self.context = context

    @property
    def detail(self) -> str:
        return str(self)


class InvalidInput(ShopError):
    code = "invalid_input"
    default_message = "Malformed request."


class NotFound(ShopError):
    code = "not_found"
    status_code = 404
    default_message = "Not found."


class ProductNotFound(NotFound):
    code = "product_not_found"
    default_message = "Product not found."


class CartNotFound(NotFound):
    code = "cart_not_found"
    default_message = "Cart not found."


class CheckoutNotFound(NotFound):
    code = "checkout_not_found"
    default_message = "Checkout not found."


class ItemNotFound(NotFound):
    code = "item_not_found"
    default_message = "Cart item not found."


class OrderNotFound(NotFound):
    code = "order_not_found"
    default_message = "Order not found."


class InsufficientStock(ShopError):
    code = "insufficient_stock"
    default_message = "Insufficient stock."


class InvalidQuantity(ShopError):
    code = "invalid_quantity"
    default_message = "Quantity must be a positive integer."


class InvalidCoupon(ShopError):
    code = "invalid_coupon"
    default_message = "Coupon does not exist."


class ExpiredCoupon(ShopError):
    code = "expired_coupon"
    default_message = "Coupon has expired."


class InvalidDiscount(ShopError):
    code = "invalid_discount"
    default_message = "Coupon discount must be between 0 and 100."


class PermissionDenied(ShopError):
    code = "permission_denied"
    status_code = 403
    default_message = "You do not have permission to perform this action."


class IdGenerationExhausted(ShopError):
    """No free order identifier was found within the allowed attempts.

    Surfaced as a server error; callers must not retry automatically.
    """

    code = "id_generation_exhausted"
    status_code = 500
    default_message = "Failed to generate a unique order id."


class PartialFulfillment(ShopError):
    """Order persisted but some stock counters were not updated.

    Warning-level: logged for operators, never raised to API clients.
    """

    code = "partial_fulfillment"
    status_code = 500

    def __init__(self, order_id: str, failed_product_ids):
        self.order_id = order_id
        self.failed_product_ids = list(failed_product_ids)
        super().__init__(
            f"Order {order_id} persisted but stock was not adjusted for products {self.failed_product_ids}",
            order_id=order_id,
            failed_product_ids=self.failed_product_ids,
        )
