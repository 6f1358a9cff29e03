from pydantic import BaseModel
from typing import Any, List, Optional
from datetime import datetime
from decimal import Decimal

from ..models.cart import CartStatus, FulfillmentType
from .cart_item import CartItem
from .catalog import VendorSummary


class Cart(BaseModel):
    id: str
    customer_id: str
    vendor_id: str
    status: CartStatus
    fulfillment_type: Optional[FulfillmentType] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    items: List[CartItem] = []
    total_items: int = 0
    subtotal: Decimal = Decimal("0.00")

    class Config:
        from_attributes = True


class CartView(BaseModel):
    """Ответ всех эндпоинтов /cart"""
    cart: Optional[Cart] = None
    vendor: Optional[VendorSummary] = None


class CartItemAdd(BaseModel):
    """quantity не приводится к int здесь: проверку делает CartService"""
    listing_id: str
    quantity: Any = None
    clear_existing: bool = False


class CartUpdate(BaseModel):
    """PATCH /cart. Поле fulfillment_type учитывается, только если передано (null сбрасывает)"""
    item_id: Optional[str] = None
    quantity: Any = None
    fulfillment_type: Optional[FulfillmentType] = None
