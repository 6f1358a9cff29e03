from fastapi import APIRouter
from .routes import cart_router, orders_router

# Создаем основной API router
api_router = APIRouter(prefix="/api/v1")

# Подключаем роуты
api_router.include_router(cart_router, tags=["cart"])
api_router.include_router(orders_router)

__all__ = ["api_router"]
