import uuid
from sqlalchemy import Column, String, Integer, Numeric, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from ..database import Base


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    order_id = Column(String, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)

    # Снимок позиции корзины
    listing_id = Column(String, nullable=True)
    title = Column(String(255), nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=True)  # Цена за единицу на момент заказа
    image_url = Column(String, nullable=True)
    quantity = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Связи
    order = relationship("Order", back_populates="items")
