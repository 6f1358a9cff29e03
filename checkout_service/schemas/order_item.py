from pydantic import BaseModel
from decimal import Decimal
from typing import Optional


class OrderItem(BaseModel):
    id: str
    listing_id: Optional[str] = None
    title: str
    unit_price: Optional[Decimal] = None
    image_url: Optional[str] = None
    quantity: int

    class Config:
        from_attributes = True
