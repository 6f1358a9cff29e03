import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..events.producer import (
    event_producer,
    CheckoutEventProducer,
    CART_ITEM_ADDED,
    CART_ITEM_UPDATED,
    CART_ITEM_REMOVED,
    CART_CLEARED,
    CART_ABANDONED,
)
from ..exceptions import (
    InvalidInput,
    InvalidQuantity,
    ListingNotFound,
    CartNotFound,
    CartItemNotFound,
    VendorMismatch,
    StoreUnavailable,
)
from ..models.cart import Cart, CartStatus, FulfillmentType
from ..models.cart_item import CartItem
from ..schemas.cart import Cart as CartSchema, CartView
from .catalog_client import CatalogClient
from .pricing import compute_totals, line_total

logger = logging.getLogger(__name__)

# Отличает "fulfillment_type не передан" от "передан null"
UNSET: Any = object()


def validate_quantity(quantity: Any, minimum: int) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < minimum:
        if minimum >= 1:
            raise InvalidQuantity(f"Quantity must be at least {minimum}")
        raise InvalidQuantity()
    return quantity


def coerce_fulfillment_type(value: Any) -> Optional[FulfillmentType]:
    if value is None or isinstance(value, FulfillmentType):
        return value
    try:
        return FulfillmentType(value)
    except ValueError:
        raise InvalidInput("Invalid fulfillment type") from None


class CartService:
    """Активная корзина покупателя: одна на покупателя и на одного продавца"""

    def __init__(self, db: Session, catalog_client: Optional[CatalogClient] = None,
                 producer: Optional[CheckoutEventProducer] = None):
        self.db = db
        self.catalog_client = catalog_client or CatalogClient()
        self.producer = producer or event_producer

    def get_active_cart(self, customer_id: str) -> Optional[Cart]:
        """Самая свежая активная корзина покупателя с позициями"""
        try:
            return (
                self.db.query(Cart)
                .options(selectinload(Cart.items))
                .filter(Cart.customer_id == customer_id, Cart.status == CartStatus.ACTIVE)
                .order_by(Cart.created_at.desc())
                .first()
            )
        except SQLAlchemyError as e:
            logger.error(f"❌ Error loading cart for customer {customer_id}: {e}")
            raise StoreUnavailable("Failed to load cart") from e

    async def get_cart_view(self, customer_id: str) -> CartView:
        """Корзина и профиль продавца, либо {cart: null, vendor: null}"""
        return await self._view(self.get_active_cart(customer_id))

    async def add_item(self, customer_id: str, listing_id: str, quantity: int = 1,
                       allow_vendor_switch: bool = False) -> CartView:
        """Добавить листинг в корзину, создав её при необходимости"""
        validate_quantity(quantity, 1)

        listing = await self.catalog_client.get_listing(listing_id)
        if listing is None:
            raise ListingNotFound()

        cart = self.get_active_cart(customer_id)
        abandoned_cart_id = None
        switching_vendor = cart is not None and cart.vendor_id != listing.vendor_id

        if switching_vendor and not allow_vendor_switch:
            logger.info(
                f"Cart {cart.id} belongs to vendor {cart.vendor_id}, "
                f"listing {listing.id} to vendor {listing.vendor_id}"
            )
            raise VendorMismatch(cart.vendor_id)

        try:
            if switching_vendor:
                cart.status = CartStatus.ABANDONED
                abandoned_cart_id = cart.id
                # Старая корзина должна перестать быть активной до вставки новой
                self.db.flush()
                cart = None

            if cart is None:
                cart = Cart(
                    customer_id=customer_id,
                    vendor_id=listing.vendor_id,
                    status=CartStatus.ACTIVE,
                    fulfillment_type=None
                )
                self.db.add(cart)

            item = next((i for i in cart.items if i.listing_id == listing.id), None)
            if item is not None:
                item.quantity += quantity
                action = "updated"
            else:
                item = CartItem(
                    vendor_id=listing.vendor_id,
                    listing_id=listing.id,
                    quantity=quantity,
                    title=listing.title,
                    unit_price=listing.price,
                    image_url=listing.photo_url
                )
                cart.items.append(item)
                action = "added"

            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error adding listing {listing_id} to cart of {customer_id}: {e}")
            raise StoreUnavailable("Failed to update cart") from e

        logger.info(f"🛒 Listing {listing.id} x{quantity} {action} in cart of customer {customer_id}")

        if abandoned_cart_id:
            await self._publish_cart_abandoned_event(customer_id, abandoned_cart_id, reason="vendor_switch")

        view = await self.get_cart_view(customer_id)
        await self._publish_item_added_event(customer_id, view, listing.id, quantity, action)
        return view

    async def update_cart(self, customer_id: str, item_id: Optional[str] = None,
                          quantity: Any = None, fulfillment_type: Any = UNSET) -> CartView:
        """
        PATCH корзины: тип получения и/или количество одной позиции.

        Все входные данные проверяются до первой записи, изменения
        фиксируются одним коммитом. quantity=0 удаляет позицию.
        """
        cart = self.get_active_cart(customer_id)
        if cart is None:
            raise CartNotFound()
        self._ensure_owner(cart, customer_id)

        item = None
        if item_id is not None:
            validate_quantity(quantity, 0)
            item = self._owned_item(cart, item_id)
        elif quantity is not None:
            raise InvalidInput("Missing item_id")

        new_fulfillment = UNSET
        if fulfillment_type is not UNSET:
            new_fulfillment = coerce_fulfillment_type(fulfillment_type)

        cart_id = cart.id
        old_quantity = item.quantity if item is not None else None
        item_listing_id = item.listing_id if item is not None else None

        try:
            if new_fulfillment is not UNSET and new_fulfillment != cart.fulfillment_type:
                cart.fulfillment_type = new_fulfillment

            if item is not None:
                if quantity == 0:
                    cart.items.remove(item)
                else:
                    item.quantity = quantity

            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error updating cart {cart_id}: {e}")
            raise StoreUnavailable("Failed to update cart") from e

        view = await self.get_cart_view(customer_id)

        if item_id is not None:
            if quantity == 0:
                logger.info(f"🗑️ Item {item_id} removed from cart of customer {customer_id}")
                await self._publish_item_removed_event(customer_id, view, item_id, item_listing_id)
            else:
                logger.info(f"✏️ Item {item_id} quantity {old_quantity} -> {quantity} for customer {customer_id}")
                await self._publish_item_updated_event(customer_id, view, item_id, old_quantity, quantity)

        return view

    async def update_item(self, customer_id: str, item_id: str, quantity: Any) -> CartView:
        """Изменить количество позиции, 0 удаляет её"""
        return await self.update_cart(customer_id, item_id=item_id, quantity=quantity)

    async def remove_item(self, customer_id: str, item_id: str) -> CartView:
        return await self.update_item(customer_id, item_id, 0)

    async def set_fulfillment_type(self, customer_id: str, fulfillment_type: Any) -> CartView:
        return await self.update_cart(customer_id, fulfillment_type=fulfillment_type)

    async def clear_cart(self, customer_id: str) -> CartView:
        """Очистить корзину. Без активной корзины ничего не делает"""
        cart = self.get_active_cart(customer_id)
        if cart is None:
            return CartView()
        self._ensure_owner(cart, customer_id)

        cart_id = cart.id
        items_count = len(cart.items)

        try:
            cart.items.clear()
            cart.status = CartStatus.ABANDONED
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error clearing cart {cart_id}: {e}")
            raise StoreUnavailable("Failed to clear cart") from e

        logger.info(f"🧹 Cart {cart_id} cleared for customer {customer_id}: {items_count} items removed")
        await self._publish_cart_cleared_event(customer_id, cart_id, items_count)
        return CartView()

    @staticmethod
    def _ensure_owner(cart: Cart, customer_id: str):
        if cart.customer_id != customer_id:
            raise CartNotFound()

    @staticmethod
    def _owned_item(cart: Cart, item_id: str) -> CartItem:
        item = next((i for i in cart.items if i.id == item_id), None)
        if item is None:
            raise CartItemNotFound()
        return item

    async def _view(self, cart: Optional[Cart]) -> CartView:
        if cart is None:
            return CartView()
        vendor = await self.catalog_client.get_vendor(cart.vendor_id)
        return CartView(cart=self.to_schema(cart), vendor=vendor)

    @staticmethod
    def to_schema(cart: Cart) -> CartSchema:
        items = list(cart.items)
        subtotal, _, _ = compute_totals(items)
        return CartSchema.model_validate(cart).model_copy(update={
            "total_items": sum(item.quantity for item in items),
            "subtotal": subtotal
        })

    # Методы для публикации событий в Kafka

    async def _publish_item_added_event(self, customer_id: str, view: CartView, listing_id: str,
                                        quantity: int, action: str):
        item = next((i for i in view.cart.items if i.listing_id == listing_id), None) if view.cart else None
        payload = {
            "cart_id": view.cart.id if view.cart else None,
            "customer_id": customer_id,
            "vendor_id": view.cart.vendor_id if view.cart else None,
            "item": {
                "item_id": item.id if item else None,
                "listing_id": listing_id,
                "quantity_added": quantity,
                "quantity": item.quantity if item else quantity,
                "unit_price": item.unit_price if item else None,
                "total_price": line_total(item.unit_price, item.quantity) if item else None
            },
            "action": action  # "added" или "updated"
        }
        await self.producer.publish_event(
            topic=CART_ITEM_ADDED,
            event_type="item_added_to_cart",
            payload=payload,
            key=customer_id
        )

    async def _publish_item_updated_event(self, customer_id: str, view: CartView, item_id: str,
                                          old_quantity: int, quantity: int):
        payload = {
            "cart_id": view.cart.id if view.cart else None,
            "customer_id": customer_id,
            "item_id": item_id,
            "change": {
                "from": old_quantity,
                "to": quantity,
                "difference": quantity - old_quantity
            },
            "action": "updated"
        }
        await self.producer.publish_event(
            topic=CART_ITEM_UPDATED,
            event_type="item_updated_in_cart",
            payload=payload,
            key=customer_id
        )

    async def _publish_item_removed_event(self, customer_id: str, view: CartView, item_id: str,
                                          listing_id: Optional[str]):
        payload = {
            "cart_id": view.cart.id if view.cart else None,
            "customer_id": customer_id,
            "item_id": item_id,
            "listing_id": listing_id,
            "action": "removed"
        }
        await self.producer.publish_event(
            topic=CART_ITEM_REMOVED,
            event_type="item_removed_from_cart",
            payload=payload,
            key=customer_id
        )

    async def _publish_cart_cleared_event(self, customer_id: str, cart_id: str, items_count: int):
        payload = {
            "cart_id": cart_id,
            "customer_id": customer_id,
            "items_removed": items_count,
            "action": "cleared"
        }
        await self.producer.publish_event(
            topic=CART_CLEARED,
            event_type="cart_cleared",
            payload=payload,
            key=customer_id
        )

    async def _publish_cart_abandoned_event(self, customer_id: str, cart_id: str, reason: str):
        payload = {
            "cart_id": cart_id,
            "customer_id": customer_id,
            "reason": reason,
            "action": "abandoned"
        }
        await self.producer.publish_event(
            topic=CART_ABANDONED,
            event_type="cart_abandoned",
            payload=payload,
            key=customer_id
        )
