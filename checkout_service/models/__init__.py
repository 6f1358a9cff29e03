from .cart import Cart, CartStatus, FulfillmentType
from .cart_item import CartItem
from .order import Order, OrderStatus
from .order_item import OrderItem

__all__ = [
    "Cart",
    "CartStatus",
    "FulfillmentType",
    "CartItem",
    "Order",
    "OrderStatus",
    "OrderItem"
]
