from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..exceptions import Unauthorized
from ..services.catalog_client import CatalogClient
from ..services.cart_service import CartService
from ..services.order_service import OrderService


def get_current_customer(request: Request) -> str:
    """ID покупателя из заголовка, который проставляет auth gateway"""
    customer_id = (request.headers.get(settings.auth_header) or "").strip()
    if not customer_id:
        raise Unauthorized()
    return customer_id


def get_catalog_client() -> CatalogClient:
    """Dependency для получения CatalogClient"""
    return CatalogClient()


def get_cart_service(
    db: Session = Depends(get_db),
    catalog_client: CatalogClient = Depends(get_catalog_client)
) -> CartService:
    """Dependency для получения CartService"""
    return CartService(db, catalog_client=catalog_client)


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    """Dependency для получения OrderService"""
    return OrderService(db)
