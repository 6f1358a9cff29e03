import uuid
from sqlalchemy import Column, String, DateTime, Enum, Numeric, Text, func
from sqlalchemy.orm import relationship
from enum import Enum as PyEnum
from ..database import Base
from .cart import FulfillmentType, enum_values


class OrderStatus(PyEnum):
    REQUESTED = "requested"  # Заказ получен, ждёт продавца
    CONFIRMED = "confirmed"  # Подтверждён продавцом
    READY = "ready"  # Готов к выдаче
    OUT_FOR_DELIVERY = "out_for_delivery"  # Передан курьеру
    FULFILLED = "fulfilled"  # Выдан
    CANCELLED = "cancelled"  # Отменён
    COMPLETED = "completed"  # Закрыт


PENDING_STATUSES = (
    OrderStatus.REQUESTED,
    OrderStatus.CONFIRMED,
    OrderStatus.READY,
    OrderStatus.OUT_FOR_DELIVERY,
)

HISTORY_STATUSES = (
    OrderStatus.FULFILLED,
    OrderStatus.COMPLETED,
    OrderStatus.CANCELLED,
)

ORDER_STATUS_LABELS = {
    OrderStatus.REQUESTED: "Requested",
    OrderStatus.CONFIRMED: "Confirmed",
    OrderStatus.READY: "Ready",
    OrderStatus.OUT_FOR_DELIVERY: "Out for delivery",
    OrderStatus.FULFILLED: "Fulfilled",
    OrderStatus.CANCELLED: "Cancelled",
    OrderStatus.COMPLETED: "Completed",
}

ORDER_STATUS_DESCRIPTIONS = {
    OrderStatus.REQUESTED: "We received the order request.",
    OrderStatus.CONFIRMED: "The vendor confirmed the order.",
    OrderStatus.READY: "Your order is ready for pickup.",
    OrderStatus.OUT_FOR_DELIVERY: "Your order is on the way.",
    OrderStatus.FULFILLED: "Order completed.",
    OrderStatus.CANCELLED: "Order cancelled.",
    OrderStatus.COMPLETED: "Order completed.",
}


class Order(Base):
    __tablename__ = "orders"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    order_number = Column(String(32), nullable=False, unique=True, index=True)
    customer_id = Column(String, nullable=False, index=True)
    vendor_id = Column(String, nullable=False, index=True)
    # Один заказ на корзину
    cart_id = Column(String, nullable=True, unique=True, index=True)

    # Статус заказа (переходы после requested делает сторона продавца)
    status = Column(
        Enum(OrderStatus, name="order_status", values_callable=enum_values),
        default=OrderStatus.REQUESTED,
        nullable=False
    )
    fulfillment_type = Column(
        Enum(FulfillmentType, name="fulfillment_type", values_callable=enum_values),
        nullable=False
    )

    # Контакты
    contact_name = Column(String(255), nullable=False)
    contact_phone = Column(String(64), nullable=False)
    contact_email = Column(String(255), nullable=True)

    # Доставка
    delivery_address1 = Column(String(255), nullable=True)
    delivery_address2 = Column(String(255), nullable=True)
    delivery_city = Column(String(255), nullable=True)
    delivery_state = Column(String(64), nullable=True)
    delivery_postal_code = Column(String(32), nullable=True)
    delivery_instructions = Column(Text, nullable=True)
    delivery_time = Column(String(64), nullable=True)
    pickup_time = Column(String(64), nullable=True)

    # Суммы
    subtotal = Column(Numeric(10, 2), nullable=False)
    fees = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)

    # Временные метки
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
    confirmed_at = Column(DateTime, nullable=True)
    fulfilled_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)

    # Связи
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.created_at"
    )
