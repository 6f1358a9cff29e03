from pydantic import BaseModel
from typing import Optional
from decimal import Decimal


class Listing(BaseModel):
    """Листинг из каталога в том виде, в каком он нужен корзине"""
    id: str
    vendor_id: str
    title: str
    price: Optional[Decimal] = None
    photo_url: Optional[str] = None


class VendorSummary(BaseModel):
    id: str
    business_name: Optional[str] = None
    full_name: Optional[str] = None
    profile_photo_url: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
