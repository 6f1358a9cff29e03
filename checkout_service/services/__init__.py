from .cart_service import CartService
from .order_service import OrderService
from .catalog_client import CatalogClient

__all__ = [
    "CartService",
    "OrderService",
    "CatalogClient"
]
