import logging
from functools import partial
from typing import Callable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..config import settings
from ..events.producer import event_producer, CheckoutEventProducer, ORDER_CREATED
from ..exceptions import (
    CheckoutError,
    InvalidInput,
    MissingContactDetails,
    CartNotFound,
    EmptyCart,
    MissingFulfillmentType,
    MissingDeliveryAddress,
    OrderNotFound,
    OrderCreationFailed,
    StoreUnavailable,
)
from ..models.cart import Cart, CartStatus, FulfillmentType
from ..models.order import Order, OrderStatus, PENDING_STATUSES, HISTORY_STATUSES
from ..models.order_item import OrderItem
from ..schemas.order import OrderCreate
from .order_numbers import InsertOutcome, allocate, generate_order_number
from .pricing import compute_totals

logger = logging.getLogger(__name__)

ORDER_SCOPES = {
    "pending": PENDING_STATUSES,
    "history": HISTORY_STATUSES,
}


def is_order_number_collision(error: IntegrityError) -> bool:
    """Нарушение уникальности именно по orders.order_number"""
    message = str(error.orig).lower()
    unique_violation = (
        getattr(error.orig, "pgcode", None) == "23505"
        or "unique" in message
        or "duplicate" in message
    )
    return unique_violation and "order_number" in message


class OrderService:
    """Оформление заказа из активной корзины и чтение заказов покупателя"""

    def __init__(self, db: Session, producer: Optional[CheckoutEventProducer] = None,
                 generate_number: Optional[Callable[[], str]] = None):
        self.db = db
        self.producer = producer or event_producer
        self.generate_number = generate_number or partial(
            generate_order_number,
            prefix=settings.order_number_prefix,
            length=settings.order_number_length
        )

    def _get_active_cart(self, customer_id: str, cart_id: Optional[str] = None) -> Optional[Cart]:
        try:
            query = (
                self.db.query(Cart)
                .options(selectinload(Cart.items))
                .filter(Cart.customer_id == customer_id, Cart.status == CartStatus.ACTIVE)
            )
            if cart_id:
                query = query.filter(Cart.id == cart_id)
            return query.order_by(Cart.created_at.desc()).with_for_update(of=Cart).first()
        except SQLAlchemyError as e:
            logger.error(f"❌ Error loading cart for customer {customer_id}: {e}")
            raise StoreUnavailable("Failed to load cart") from e

    async def place_order(self, customer_id: str, request: OrderCreate) -> Order:
        """
        Оформляет заказ из активной корзины покупателя.

        Заказ, его позиции и перевод корзины в submitted пишутся одной
        транзакцией. Вставка заказа идёт в savepoint, чтобы коллизия номера
        откатывала только её и allocate() мог повторить попытку.
        """
        if not request.contact_name or not request.contact_phone:
            raise MissingContactDetails()

        cart = self._get_active_cart(customer_id, request.cart_id)
        if cart is None:
            raise CartNotFound()
        if cart.customer_id != customer_id:
            raise CartNotFound()

        items = list(cart.items)
        if not items:
            raise EmptyCart()

        fulfillment_type = request.fulfillment_type or cart.fulfillment_type
        if fulfillment_type is None:
            raise MissingFulfillmentType()
        if not isinstance(fulfillment_type, FulfillmentType):
            raise InvalidInput("Invalid fulfillment type")

        is_delivery = fulfillment_type == FulfillmentType.DELIVERY
        if is_delivery and not request.delivery_address1:
            raise MissingDeliveryAddress()

        subtotal, fees, total = compute_totals(items)
        cart_id = cart.id

        fields = dict(
            customer_id=customer_id,
            vendor_id=cart.vendor_id,
            cart_id=cart_id,
            status=OrderStatus.REQUESTED,
            fulfillment_type=fulfillment_type,
            contact_name=request.contact_name,
            contact_phone=request.contact_phone,
            contact_email=request.contact_email,
            delivery_address1=request.delivery_address1,
            delivery_address2=request.delivery_address2,
            delivery_city=request.delivery_city,
            delivery_state=request.delivery_state,
            delivery_postal_code=request.delivery_postal_code,
            delivery_instructions=request.delivery_instructions,
            delivery_time=request.delivery_time if is_delivery else None,
            pickup_time=request.pickup_time if not is_delivery else None,
            subtotal=subtotal,
            fees=fees,
            total=total
        )

        try:
            order = allocate(
                partial(self._try_insert_order, fields),
                generate=self.generate_number,
                max_attempts=settings.order_number_max_attempts
            )

            for item in items:
                order.items.append(OrderItem(
                    listing_id=item.listing_id,
                    title=item.title,
                    unit_price=item.unit_price,
                    image_url=item.image_url,
                    quantity=item.quantity
                ))

            cart.status = CartStatus.SUBMITTED
            self.db.commit()
        except CheckoutError:
            self.db.rollback()
            logger.error(f"❌ Order creation failed for cart {cart_id}, nothing persisted")
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error creating order from cart {cart_id}: {e}")
            raise OrderCreationFailed() from e

        self.db.refresh(order)
        logger.info(f"✅ Order {order.order_number} created from cart {cart_id} for customer {customer_id}")

        await self._publish_order_created_event(order)
        return order

    def _try_insert_order(self, fields: dict, candidate: str) -> InsertOutcome:
        order = Order(order_number=candidate, **fields)
        try:
            with self.db.begin_nested():
                self.db.add(order)
        except IntegrityError as e:
            if is_order_number_collision(e):
                return InsertOutcome.collision(e)
            return InsertOutcome.fatal(e)
        except SQLAlchemyError as e:
            return InsertOutcome.fatal(e)
        return InsertOutcome.ok(order)

    def get_order_by_number(self, customer_id: str, order_number: str) -> Order:
        """Заказ покупателя по номеру, без учёта регистра"""
        number = (order_number or "").strip()
        if not number:
            raise OrderNotFound()

        try:
            order = (
                self.db.query(Order)
                .options(selectinload(Order.items))
                .filter(
                    func.lower(Order.order_number) == number.lower(),
                    Order.customer_id == customer_id
                )
                .first()
            )
        except SQLAlchemyError as e:
            logger.error(f"❌ Error getting order {number}: {e}")
            raise StoreUnavailable("Failed to load order") from e

        if order is None:
            raise OrderNotFound()
        return order

    def list_orders(self, customer_id: str, scope: str = "pending", page: int = 1,
                    per_page: int = 8) -> Tuple[List[Order], bool]:
        """Заказы покупателя, новые сверху. Возвращает (заказы, есть_ли_ещё)"""
        statuses = ORDER_SCOPES.get(scope)
        if statuses is None:
            raise InvalidInput(f"Unknown order scope: {scope}")

        page = max(page, 1)
        try:
            rows = (
                self.db.query(Order)
                .options(selectinload(Order.items))
                .filter(Order.customer_id == customer_id, Order.status.in_(statuses))
                .order_by(Order.created_at.desc(), Order.order_number)
                .offset((page - 1) * per_page)
                .limit(per_page + 1)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"❌ Error getting orders list for customer {customer_id}: {e}")
            raise StoreUnavailable("Failed to load orders") from e

        return rows[:per_page], len(rows) > per_page

    async def _publish_order_created_event(self, order: Order):
        """Публикует событие создания заказа"""
        payload = {
            "order_id": order.id,
            "order_number": order.order_number,
            "cart_id": order.cart_id,
            "customer_id": order.customer_id,
            "vendor_id": order.vendor_id,
            "status": order.status.value,
            "fulfillment_type": order.fulfillment_type.value,
            "subtotal": order.subtotal,
            "fees": order.fees,
            "total": order.total,
            "items": [
                {
                    "listing_id": item.listing_id,
                    "title": item.title,
                    "quantity": item.quantity,
                    "unit_price": item.unit_price
                } for item in order.items
            ],
            "created_at": order.created_at.isoformat() if order.created_at else None
        }
        await self.producer.publish_event(
            topic=ORDER_CREATED,
            event_type="order_created",
            payload=payload,
            key=order.id
        )
