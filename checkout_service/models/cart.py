import uuid
from enum import Enum as PyEnum
from sqlalchemy import Column, String, DateTime, Enum, Index, func, text
from sqlalchemy.orm import relationship
from ..database import Base


class CartStatus(PyEnum):
    ACTIVE = "active"  # Покупатель собирает заказ
    SUBMITTED = "submitted"  # Из корзины оформлен заказ
    ABANDONED = "abandoned"  # Очищена или заменена корзиной другого продавца


class FulfillmentType(PyEnum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


def enum_values(enum_cls):
    """Храним в БД value ("active"), а не имя члена ("ACTIVE")"""
    return [member.value for member in enum_cls]


class Cart(Base):
    __tablename__ = "carts"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    customer_id = Column(String, nullable=False, index=True)
    vendor_id = Column(String, nullable=False, index=True)

    status = Column(
        Enum(CartStatus, name="cart_status", values_callable=enum_values),
        default=CartStatus.ACTIVE,
        nullable=False
    )
    fulfillment_type = Column(
        Enum(FulfillmentType, name="fulfillment_type", values_callable=enum_values),
        nullable=True
    )

    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Позиции корзины
    items = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.created_at"
    )

    __table_args__ = (
        # Не больше одной активной корзины на покупателя
        Index(
            "uq_carts_one_active_per_customer",
            "customer_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )
