from fastapi import APIRouter, Depends, Query

from ...schemas.order import Order as OrderSchema, OrderCreate, OrderPlaced, OrderReceipt, OrderList
from ...services.catalog_client import CatalogClient
from ...services.order_service import OrderService
from ..dependencies import get_current_customer, get_order_service, get_catalog_client

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderPlaced)
async def place_order(
        request: OrderCreate,
        customer_id: str = Depends(get_current_customer),
        order_service: OrderService = Depends(get_order_service)
):
    """Оформить заказ из активной корзины"""
    order = await order_service.place_order(customer_id, request)
    return OrderPlaced(order_number=order.order_number)


@router.get("", response_model=OrderList)
async def get_orders(
        scope: str = Query("pending", description="pending или history"),
        page: int = Query(1, ge=1, description="Номер страницы"),
        per_page: int = Query(8, ge=1, le=100, description="Количество на странице"),
        customer_id: str = Depends(get_current_customer),
        order_service: OrderService = Depends(get_order_service)
):
    """Заказы покупателя: текущие или история"""
    orders, has_more = order_service.list_orders(customer_id, scope=scope, page=page, per_page=per_page)
    return OrderList(
        orders=[OrderSchema.model_validate(order) for order in orders],
        page=page,
        per_page=per_page,
        has_more=has_more
    )


@router.get("/{order_number}", response_model=OrderReceipt)
async def get_order(
        order_number: str,
        customer_id: str = Depends(get_current_customer),
        order_service: OrderService = Depends(get_order_service),
        catalog_client: CatalogClient = Depends(get_catalog_client)
):
    """Чек заказа по номеру"""
    order = order_service.get_order_by_number(customer_id, order_number)
    vendor = await catalog_client.get_vendor(order.vendor_id)
    return OrderReceipt(order=OrderSchema.model_validate(order), vendor=vendor)
