from .catalog import Listing, VendorSummary
from .cart import Cart, CartView, CartItemAdd, CartUpdate
from .cart_item import CartItem
from .order import Order, OrderCreate, OrderPlaced, OrderReceipt, OrderList
from .order_item import OrderItem

__all__ = [
    "Listing",
    "VendorSummary",
    "Cart",
    "CartView",
    "CartItemAdd",
    "CartUpdate",
    "CartItem",
    "Order",
    "OrderCreate",
    "OrderPlaced",
    "OrderReceipt",
    "OrderList",
    "OrderItem"
]
