from pydantic import BaseModel, computed_field, field_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from ..models.cart import FulfillmentType
from ..models.order import OrderStatus, ORDER_STATUS_LABELS, ORDER_STATUS_DESCRIPTIONS
from .catalog import VendorSummary
from .order_item import OrderItem


class OrderCreate(BaseModel):
    """Тело POST /orders. Строки обрезаются, пустые превращаются в None"""
    cart_id: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    fulfillment_type: Optional[FulfillmentType] = None

    delivery_address1: Optional[str] = None
    delivery_address2: Optional[str] = None
    delivery_city: Optional[str] = None
    delivery_state: Optional[str] = None
    delivery_postal_code: Optional[str] = None
    delivery_instructions: Optional[str] = None
    delivery_time: Optional[str] = None
    pickup_time: Optional[str] = None

    @field_validator(
        "cart_id",
        "contact_name",
        "contact_phone",
        "contact_email",
        "delivery_address1",
        "delivery_address2",
        "delivery_city",
        "delivery_state",
        "delivery_postal_code",
        "delivery_instructions",
        "delivery_time",
        "pickup_time",
        mode="before"
    )
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value


class OrderPlaced(BaseModel):
    order_number: str


class Order(BaseModel):
    id: str
    order_number: str
    customer_id: str
    vendor_id: str
    cart_id: Optional[str] = None
    status: OrderStatus
    fulfillment_type: FulfillmentType

    contact_name: str
    contact_phone: str
    contact_email: Optional[str] = None

    delivery_address1: Optional[str] = None
    delivery_address2: Optional[str] = None
    delivery_city: Optional[str] = None
    delivery_state: Optional[str] = None
    delivery_postal_code: Optional[str] = None
    delivery_instructions: Optional[str] = None
    delivery_time: Optional[str] = None
    pickup_time: Optional[str] = None

    subtotal: Decimal
    fees: Decimal
    total: Decimal

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    fulfilled_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    items: List[OrderItem] = []

    @computed_field
    @property
    def status_label(self) -> str:
        return ORDER_STATUS_LABELS.get(self.status, self.status.value)

    @computed_field
    @property
    def status_description(self) -> str:
        return ORDER_STATUS_DESCRIPTIONS.get(self.status, "Order in progress.")

    class Config:
        from_attributes = True


class OrderReceipt(BaseModel):
    order: Order
    vendor: Optional[VendorSummary] = None


class OrderList(BaseModel):
    orders: List[Order]
    page: int
    per_page: int
    has_more: bool
