from fastapi import APIRouter, Depends, Response

from ...schemas.cart import CartView, CartItemAdd, CartUpdate
from ...services.cart_service import CartService, UNSET
from ..dependencies import get_current_customer, get_cart_service

router = APIRouter()


def _no_store(response: Response):
    response.headers["Cache-Control"] = "no-store"


@router.get("/cart", response_model=CartView)
async def get_cart(
        response: Response,
        customer_id: str = Depends(get_current_customer),
        cart_service: CartService = Depends(get_cart_service)
):
    """Текущая корзина покупателя"""
    _no_store(response)
    return await cart_service.get_cart_view(customer_id)


@router.post("/cart", response_model=CartView)
async def add_item_to_cart(
        item: CartItemAdd,
        response: Response,
        customer_id: str = Depends(get_current_customer),
        cart_service: CartService = Depends(get_cart_service)
):
    """Добавление листинга в корзину. 409 vendor_mismatch если в корзине другой продавец"""
    _no_store(response)
    return await cart_service.add_item(
        customer_id,
        item.listing_id,
        quantity=item.quantity if item.quantity is not None else 1,
        allow_vendor_switch=item.clear_existing
    )


@router.patch("/cart", response_model=CartView)
async def update_cart(
        update: CartUpdate,
        response: Response,
        customer_id: str = Depends(get_current_customer),
        cart_service: CartService = Depends(get_cart_service)
):
    """Изменение количества позиции и/или типа получения"""
    _no_store(response)
    fulfillment_type = update.fulfillment_type if "fulfillment_type" in update.model_fields_set else UNSET
    return await cart_service.update_cart(
        customer_id,
        item_id=update.item_id,
        quantity=update.quantity,
        fulfillment_type=fulfillment_type
    )


@router.delete("/cart", response_model=CartView)
async def clear_cart(
        response: Response,
        customer_id: str = Depends(get_current_customer),
        cart_service: CartService = Depends(get_cart_service)
):
    """Очистка корзины"""
    _no_store(response)
    return await cart_service.clear_cart(customer_id)
