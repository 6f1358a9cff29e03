from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal


class CartItem(BaseModel):
    id: str
    cart_id: str
    vendor_id: str
    listing_id: str
    quantity: int
    title: str
    unit_price: Optional[Decimal] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
