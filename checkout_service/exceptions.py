"""Ошибки checkout-сервиса.

Каждая ошибка знает свой HTTP-статус и машинный код, поэтому сервисы
бросают их напрямую, а main.py превращает их в JSON вида
{"error": message, ...extra} одним обработчиком.
"""
from typing import Any, Dict, Optional


class CheckoutError(Exception):
    """Базовая ошибка сервиса"""

    status_code = 500
    code = "checkout_error"
    default_message = "Checkout error"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.default_message
        self.extra: Dict[str, Any] = extra
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, **self.extra}


class Unauthorized(CheckoutError):
    status_code = 401
    code = "unauthorized"
    default_message = "Unauthorized"


class InvalidInput(CheckoutError):
    status_code = 400
    code = "invalid_input"
    default_message = "Invalid request"


class InvalidQuantity(InvalidInput):
    code = "invalid_quantity"
    default_message = "Invalid quantity"


class MissingContactDetails(InvalidInput):
    code = "missing_contact_details"
    default_message = "Missing contact details"


class EmptyCart(InvalidInput):
    code = "empty_cart"
    default_message = "Cart is empty"


class MissingFulfillmentType(InvalidInput):
    code = "missing_fulfillment_type"
    default_message = "Missing fulfillment type"


class MissingDeliveryAddress(InvalidInput):
    code = "missing_delivery_address"
    default_message = "Delivery address required"


class NotFound(CheckoutError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class ListingNotFound(NotFound):
    code = "listing_not_found"
    default_message = "Listing not found"


class CartNotFound(NotFound):
    code = "cart_not_found"
    default_message = "Cart not found"


class CartItemNotFound(NotFound):
    code = "cart_item_not_found"
    default_message = "Cart item not found"


class OrderNotFound(NotFound):
    code = "order_not_found"
    default_message = "Order not found"


class VendorMismatch(CheckoutError):
    """В корзине товары другого продавца. Клиент может повторить запрос с clear_existing."""

    status_code = 409
    code = "vendor_mismatch"
    default_message = "Cart vendor mismatch"

    def __init__(self, cart_vendor_id: str, message: Optional[str] = None):
        self.cart_vendor_id = cart_vendor_id
        super().__init__(message, code=self.code, cart_vendor_id=cart_vendor_id)


class OrderCreationFailed(CheckoutError):
    code = "order_creation_failed"
    default_message = "Failed to create order"


class StoreUnavailable(CheckoutError):
    code = "store_unavailable"
    default_message = "Storage is unavailable"


class CatalogUnavailable(StoreUnavailable):
    status_code = 503
    code = "catalog_unavailable"
    default_message = "Failed to load listing"
