import uuid
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, func
from sqlalchemy.orm import relationship
from ..database import Base


class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    cart_id = Column(String, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    vendor_id = Column(String, nullable=False)  # Дублирует carts.vendor_id
    listing_id = Column(String, nullable=False, index=True)
    quantity = Column(Integer, nullable=False)

    # Снимок листинга на момент добавления
    title = Column(String(255), nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=True)
    image_url = Column(String, nullable=True)

    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Связь с корзиной
    cart = relationship("Cart", back_populates="items")

    __table_args__ = (
        UniqueConstraint("cart_id", "listing_id", name="uq_cart_items_cart_listing"),
        CheckConstraint("quantity >= 1", name="ck_cart_items_quantity_positive"),
    )
